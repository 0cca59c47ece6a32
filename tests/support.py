import os

# Settings are read once and cached, so the test environment is pinned before
# anything from pda is imported.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("REDIS_URL", "")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from pda.db import models  # noqa: E402,F401
from pda.db.base import Base  # noqa: E402
from pda.db.models import User  # noqa: E402
from pda.db.session import build_engine, get_db  # noqa: E402


def make_session_factory() -> sessionmaker:
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def add_user(db: Session, username: str, faction: str = "LONER") -> User:
    user = User(username=username, steam_id=f"steam-{username}", hashed_password="not-a-real-hash", faction=faction)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_client(session_factory: sessionmaker) -> TestClient:
    from pda.main import app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


def clear_overrides() -> None:
    from pda.main import app

    app.dependency_overrides.clear()
