from datetime import datetime, timezone
import logging

from sqlalchemy import and_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pda.db.models import (
    REQUEST_ACCEPTED,
    REQUEST_DECISIONS,
    REQUEST_PENDING,
    FriendRequest,
    Friendship,
    User,
)

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def user_brief(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "faction": user.faction,
        "is_online": user.is_online,
    }


def _friendship_exists(db: Session, user_id: str, friend_id: str) -> bool:
    pair = db.scalar(
        select(Friendship.id).where(
            and_(
                Friendship.user_id == user_id,
                Friendship.friend_id == friend_id,
            )
        )
    )
    return pair is not None


def _ensure_friendship_pair(db: Session, user_a_id: str, user_b_id: str) -> None:
    if user_a_id == user_b_id:
        return
    if not _friendship_exists(db, user_a_id, user_b_id):
        db.add(Friendship(user_id=user_a_id, friend_id=user_b_id))
    if not _friendship_exists(db, user_b_id, user_a_id):
        db.add(Friendship(user_id=user_b_id, friend_id=user_a_id))


class SocialService:
    """Friend lists and the friend-request workflow.

    A request moves PENDING -> ACCEPTED or PENDING -> DECLINED exactly once.
    Resolved rows stay in the table as history; only PENDING rows are listed
    and answerable, and a fresh request may be sent after a resolution.
    """

    def are_friends(self, db: Session, user_a_id: str, user_b_id: str) -> bool:
        return _friendship_exists(db, user_a_id, user_b_id) or _friendship_exists(
            db, user_b_id, user_a_id
        )

    def list_friends(self, db: Session, user_id: str) -> list[User]:
        friend_ids = db.scalars(
            select(Friendship.friend_id).where(Friendship.user_id == user_id)
        ).all()
        if not friend_ids:
            return []
        return db.scalars(
            select(User)
            .where(User.id.in_(friend_ids))
            .order_by(User.username.asc())
        ).all()

    def list_pending_requests(self, db: Session, user_id: str) -> list[dict]:
        requests = db.scalars(
            select(FriendRequest)
            .where(FriendRequest.recipient_id == user_id)
            .where(FriendRequest.status == REQUEST_PENDING)
            .order_by(FriendRequest.created_at.desc())
        ).all()
        return self._map_friend_requests(db, requests)

    def send_friend_request(self, db: Session, sender: User, recipient_id: str) -> dict:
        recipient_id = recipient_id.strip()
        if recipient_id == sender.id:
            raise ValueError("You can't send a friend request to yourself.")
        recipient = db.get(User, recipient_id)
        if not recipient:
            raise LookupError("User not found")
        if self.are_friends(db, sender.id, recipient.id):
            raise ValueError("User is already your friend.")

        existing_pending = db.scalar(
            select(FriendRequest.id).where(
                FriendRequest.sender_id == sender.id,
                FriendRequest.recipient_id == recipient.id,
                FriendRequest.status == REQUEST_PENDING,
            )
        )
        if existing_pending:
            raise ValueError("Friend request already sent.")

        friend_request = FriendRequest(
            sender_id=sender.id,
            recipient_id=recipient.id,
            status=REQUEST_PENDING,
        )
        db.add(friend_request)
        try:
            db.commit()
        except IntegrityError as exc:
            # Lost a race with an identical request; the pending-pair index held.
            db.rollback()
            raise ValueError("Friend request already sent.") from exc
        db.refresh(friend_request)
        logger.info(
            "Friend request %s sent from %s to %s",
            friend_request.id,
            sender.id,
            recipient.id,
        )
        return self._map_friend_requests(db, [friend_request])[0]

    def respond_to_friend_request(
        self,
        db: Session,
        request_id: str,
        actor_user_id: str,
        decision: str,
    ) -> dict:
        if decision not in REQUEST_DECISIONS:
            raise ValueError("Status must be ACCEPTED or DECLINED")

        request = db.scalar(
            select(FriendRequest).where(
                FriendRequest.id == request_id,
                FriendRequest.recipient_id == actor_user_id,
                FriendRequest.status == REQUEST_PENDING,
            )
        )
        if not request:
            raise LookupError("Friend request not found or already processed.")

        # Status flip and both friendship rows commit together. The guarded
        # UPDATE only matches while the row is still PENDING, so two concurrent
        # answers cannot both win.
        result = db.execute(
            update(FriendRequest)
            .where(
                FriendRequest.id == request.id,
                FriendRequest.status == REQUEST_PENDING,
            )
            .values(status=decision, resolved_at=_utc_now())
        )
        if result.rowcount != 1:
            db.rollback()
            raise LookupError("Friend request not found or already processed.")
        if decision == REQUEST_ACCEPTED:
            _ensure_friendship_pair(db, request.sender_id, request.recipient_id)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ValueError("Friendship changed concurrently, try again.") from exc

        db.refresh(request)
        logger.info(
            "Friend request %s from %s %s by %s",
            request.id,
            request.sender_id,
            decision.lower(),
            actor_user_id,
        )
        return self._map_friend_requests(db, [request])[0]

    def _map_friend_requests(
        self,
        db: Session,
        requests: list[FriendRequest],
    ) -> list[dict]:
        sender_ids = {request.sender_id for request in requests}
        users = db.scalars(select(User).where(User.id.in_(list(sender_ids)))).all() if sender_ids else []
        user_map = {user.id: user for user in users}

        return [
            {
                "id": request.id,
                "sender_id": request.sender_id,
                "recipient_id": request.recipient_id,
                "sender": user_brief(user_map[request.sender_id])
                if request.sender_id in user_map
                else None,
                "status": request.status,
                "created_at": request.created_at,
                "resolved_at": request.resolved_at,
            }
            for request in requests
        ]


social_service = SocialService()
