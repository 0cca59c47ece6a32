from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from pda.api.deps import get_current_user, get_page_window
from pda.db.models import User
from pda.db.session import get_db
from pda.schemas.messages import (
    DirectMessagesPage,
    GlobalMessagesPage,
    MessageCreateRequest,
    MessageRead,
)
from pda.services import message_service
from pda.services.pagination import PageWindow

router = APIRouter()


@router.get("/global", response_model=GlobalMessagesPage)
def list_global_messages(
    window: PageWindow = Depends(get_page_window),
    _: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> GlobalMessagesPage:
    payload = message_service.list_global_messages(db, window)
    return GlobalMessagesPage.model_validate(payload)


@router.get("/direct", response_model=DirectMessagesPage)
def list_direct_messages(
    recipient_id: str | None = Query(default=None, alias="recipientId"),
    window: PageWindow = Depends(get_page_window),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> DirectMessagesPage:
    try:
        payload = message_service.list_direct_messages(db, current_user.id, recipient_id or "", window)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return DirectMessagesPage.model_validate(payload)


@router.post("", response_model=MessageRead, status_code=status.HTTP_201_CREATED)
def post_message(
    payload: MessageCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageRead:
    try:
        message = message_service.post_message(
            db,
            current_user,
            content=payload.content,
            recipient_id=payload.recipient_id,
            is_anonymous=payload.is_anonymous,
        )
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return MessageRead.model_validate(message)
