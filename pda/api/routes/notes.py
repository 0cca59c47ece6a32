from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from pda.api.deps import get_current_user
from pda.db.models import User
from pda.db.session import get_db
from pda.schemas.common import StatusMessage
from pda.schemas.notes import NoteCreateRequest, NoteRead, NoteUpdateRequest
from pda.services import note_service

router = APIRouter()


@router.get("/{user_id}", response_model=list[NoteRead])
def list_notes(
    user_id: str,
    _: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[NoteRead]:
    return [NoteRead.model_validate(note) for note in note_service.list_notes(db, user_id)]


@router.post("", response_model=NoteRead, status_code=status.HTTP_201_CREATED)
def create_note(
    payload: NoteCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> NoteRead:
    note = note_service.create_note(db, current_user.id, payload.title, payload.content)
    return NoteRead.model_validate(note)


@router.put("/{note_id}", response_model=NoteRead)
def update_note(
    note_id: str,
    payload: NoteUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> NoteRead:
    try:
        note = note_service.update_note(
            db,
            note_id,
            current_user.id,
            payload.model_dump(exclude_unset=True),
        )
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return NoteRead.model_validate(note)


@router.delete("/{note_id}", response_model=StatusMessage)
def delete_note(
    note_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> StatusMessage:
    try:
        note_service.delete_note(db, note_id, current_user.id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return StatusMessage(message="Note deleted successfully")
