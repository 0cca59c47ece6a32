from datetime import datetime, timezone
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from pda.core.security import hash_password, verify_password
from pda.db.models import DEFAULT_FACTION, FACTIONS, User
from pda.schemas.auth import RegisterRequest

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def get_user_by_id(db: Session, user_id: str) -> User | None:
    return db.get(User, user_id)


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.scalar(select(User).where(User.username == username))


def create_user(db: Session, payload: RegisterRequest) -> User:
    username = payload.username
    if get_user_by_username(db, username):
        raise ValueError("Username already in use")

    user = User(
        username=username,
        steam_id=payload.steam_id,
        hashed_password=hash_password(payload.password),
        faction=payload.faction or DEFAULT_FACTION,
        is_online=False,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s (%s)", user.username, user.id)
    return user


def authenticate_user(db: Session, username: str, password: str) -> User:
    """Check credentials and mark the user online.

    Raises ``LookupError`` for an unknown username and ``PermissionError`` for a
    wrong password so the caller can answer 404 and 401 respectively.
    """
    user = get_user_by_username(db, username.strip())
    if not user:
        raise LookupError("User not found")
    if not verify_password(password, user.hashed_password):
        raise PermissionError("Invalid credentials")

    user.last_login = _utc_now()
    user.is_online = True
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def logout_user(db: Session, user_id: str) -> User:
    user = get_user_by_id(db, user_id)
    if not user:
        raise LookupError("User not found")
    user.is_online = False
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("User %s logged out", user.username)
    return user


def update_profile(db: Session, user: User, updates: dict) -> User:
    faction = updates.get("faction")
    if faction is not None and faction not in FACTIONS:
        raise ValueError("Unknown faction")
    for key in ("faction", "steam_id"):
        value = updates.get(key)
        if value is not None:
            setattr(user, key, value)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
