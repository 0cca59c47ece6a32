from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from pda.db.models import Note

NOTE_FIELDS = ("title", "content")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def list_notes(db: Session, user_id: str) -> list[Note]:
    return db.scalars(
        select(Note)
        .where(Note.user_id == user_id)
        .order_by(Note.created_at.desc())
    ).all()


def create_note(db: Session, user_id: str, title: str, content: str) -> Note:
    now = _utc_now()
    note = Note(user_id=user_id, title=title, content=content, created_at=now, updated_at=now)
    db.add(note)
    db.commit()
    db.refresh(note)
    return note


def _get_owned_note(db: Session, note_id: str, user_id: str) -> Note:
    # Notes of other users are reported as missing rather than forbidden.
    note = db.scalar(select(Note).where(Note.id == note_id, Note.user_id == user_id))
    if not note:
        raise LookupError("Note not found")
    return note


def update_note(db: Session, note_id: str, user_id: str, updates: dict) -> Note:
    note = _get_owned_note(db, note_id, user_id)
    for key in NOTE_FIELDS:
        if updates.get(key) is not None:
            setattr(note, key, updates[key])
    note.updated_at = _utc_now()
    db.add(note)
    db.commit()
    db.refresh(note)
    return note


def delete_note(db: Session, note_id: str, user_id: str) -> None:
    note = _get_owned_note(db, note_id, user_id)
    db.delete(note)
    db.commit()
