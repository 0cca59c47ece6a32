from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from pda.api.deps import get_current_user
from pda.db.models import REQUEST_ACCEPTED, REQUEST_DECLINED, User
from pda.db.session import get_db
from pda.schemas.social import (
    FriendRequestCreateRequest,
    FriendRequestRead,
    FriendRequestRespondRequest,
)
from pda.services.social_service import social_service

router = APIRouter()


def _respond(db: Session, current_user: User, request_id: str, decision: str) -> FriendRequestRead:
    try:
        request = social_service.respond_to_friend_request(
            db,
            request_id=request_id,
            actor_user_id=current_user.id,
            decision=decision,
        )
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return FriendRequestRead.model_validate(request)


@router.get("", response_model=list[FriendRequestRead])
def list_pending_friend_requests(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[FriendRequestRead]:
    requests = social_service.list_pending_requests(db, current_user.id)
    return [FriendRequestRead.model_validate(request) for request in requests]


@router.post("", response_model=FriendRequestRead, status_code=status.HTTP_201_CREATED)
def send_friend_request(
    payload: FriendRequestCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> FriendRequestRead:
    try:
        request = social_service.send_friend_request(db, current_user, payload.to_user_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return FriendRequestRead.model_validate(request)


@router.post("/respond", response_model=FriendRequestRead)
def respond_to_friend_request(
    payload: FriendRequestRespondRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> FriendRequestRead:
    return _respond(db, current_user, payload.request_id, payload.status)


@router.post("/{request_id}/accept", response_model=FriendRequestRead)
def accept_friend_request(
    request_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> FriendRequestRead:
    return _respond(db, current_user, request_id, REQUEST_ACCEPTED)


@router.post("/{request_id}/decline", response_model=FriendRequestRead)
def decline_friend_request(
    request_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> FriendRequestRead:
    return _respond(db, current_user, request_id, REQUEST_DECLINED)
