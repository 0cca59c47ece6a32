from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from pda.db.models import Message, User
from pda.services.pagination import PageWindow
from pda.services.social_service import user_brief


def _global_filter():
    return Message.recipient_id.is_(None)


def _conversation_filter(user_id: str, other_user_id: str):
    return or_(
        and_(Message.user_id == user_id, Message.recipient_id == other_user_id),
        and_(Message.user_id == other_user_id, Message.recipient_id == user_id),
    )


def _page_of_messages(db: Session, criteria, window: PageWindow) -> tuple[int, list[Message]]:
    total = db.scalar(select(func.count(Message.id)).where(criteria)) or 0
    rows = db.scalars(
        select(Message)
        .where(criteria)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .offset(window.offset)
        .limit(window.limit)
    ).all()
    return total, rows


def _map_messages(db: Session, messages: list[Message]) -> list[dict]:
    user_ids = {message.user_id for message in messages} | {
        message.recipient_id for message in messages if message.recipient_id
    }
    users = db.scalars(select(User).where(User.id.in_(list(user_ids)))).all() if user_ids else []
    user_map = {user.id: user for user in users}

    return [
        {
            "id": message.id,
            "user_id": message.user_id,
            "recipient_id": message.recipient_id,
            "author": user_brief(user_map[message.user_id]) if message.user_id in user_map else None,
            "recipient": user_brief(user_map[message.recipient_id])
            if message.recipient_id in user_map
            else None,
            "content": message.content,
            "is_anonymous": message.is_anonymous,
            "created_at": message.created_at,
        }
        for message in messages
    ]


def list_global_messages(db: Session, window: PageWindow) -> dict:
    total, rows = _page_of_messages(db, _global_filter(), window)
    return {
        "metadata": {
            "total_messages": total,
            "current_page": window.page,
            "total_pages": window.total_pages(total),
            "limit": window.limit,
        },
        "messages": _map_messages(db, rows),
    }


def list_direct_messages(db: Session, user_id: str, other_user_id: str, window: PageWindow) -> dict:
    other_user_id = other_user_id.strip()
    if not other_user_id:
        raise ValueError("Recipient ID is required")
    total, rows = _page_of_messages(db, _conversation_filter(user_id, other_user_id), window)
    return {
        "page": window.page,
        "limit": window.limit,
        "total_messages": total,
        "total_pages": window.total_pages(total),
        "messages": _map_messages(db, rows),
    }


def post_message(
    db: Session,
    author: User,
    content: str,
    recipient_id: str | None = None,
    is_anonymous: bool = False,
) -> dict:
    if not content.strip():
        raise ValueError("Message content is required")
    if recipient_id is not None and db.get(User, recipient_id) is None:
        raise LookupError("Recipient not found")

    message = Message(
        user_id=author.id,
        recipient_id=recipient_id,
        content=content,
        is_anonymous=is_anonymous,
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    return _map_messages(db, [message])[0]
