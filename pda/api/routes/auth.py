import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from pda.api.deps import get_current_user_id
from pda.core.request_meta import describe_client
from pda.core.security import create_access_token
from pda.db.session import get_db
from pda.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserRead
from pda.schemas.common import StatusMessage
from pda.services.auth_service import authenticate_user, create_user, logout_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db),
) -> AuthResponse:
    try:
        user = create_user(db, payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return AuthResponse(
        token=create_access_token(user.id, username=user.username),
        user=UserRead.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> AuthResponse:
    try:
        user = authenticate_user(db, payload.username, payload.password)
    except LookupError as exc:
        logger.info("Login for unknown user %r from %s", payload.username, describe_client(request))
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except PermissionError as exc:
        logger.warning("Bad password for %r from %s", payload.username, describe_client(request))
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc

    logger.info("User %s logged in from %s", user.username, describe_client(request))
    return AuthResponse(
        token=create_access_token(user.id, username=user.username),
        user=UserRead.model_validate(user),
    )


@router.post("/logout", response_model=StatusMessage)
def logout(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> StatusMessage:
    # The token itself stays valid until it expires; only the presence flag changes.
    try:
        logout_user(db, user_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return StatusMessage(message="Logged out successfully")
