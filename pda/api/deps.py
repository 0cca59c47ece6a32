from fastapi import Depends, HTTPException, Query, status
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session

from pda.core.config import get_settings
from pda.core.security import decode_access_token_payload, strip_bearer_prefix
from pda.db.models import User
from pda.db.session import get_db
from pda.services.pagination import PageWindow, normalize_page

# The token travels in Authorization either bare or as "Bearer <token>".
authorization_header = APIKeyHeader(name="Authorization", auto_error=False)


def get_access_token_payload(authorization: str | None = Depends(authorization_header)) -> dict:
    if not authorization or not authorization.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided",
        )
    payload = decode_access_token_payload(strip_bearer_prefix(authorization))
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid token",
        )
    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid token subject",
        )
    return payload


def get_current_user_id(payload: dict = Depends(get_access_token_payload)) -> str:
    return payload["sub"]


def get_current_user(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> User:
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


def get_page_window(
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
) -> PageWindow:
    settings = get_settings()
    return normalize_page(
        page,
        limit,
        default_limit=settings.default_page_limit,
        max_limit=settings.max_page_limit,
    )
