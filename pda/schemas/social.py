from typing import Literal

from pydantic import Field

from pda.schemas.common import CamelModel, UtcDatetime
from pda.schemas.users import UserBrief


class FriendRequestRead(CamelModel):
    id: str
    sender_id: str
    recipient_id: str
    sender: UserBrief | None = None
    status: str
    created_at: UtcDatetime
    resolved_at: UtcDatetime | None = None


class FriendRequestCreateRequest(CamelModel):
    to_user_id: str = Field(min_length=1, max_length=32)


class FriendRequestRespondRequest(CamelModel):
    request_id: str = Field(min_length=1, max_length=32)
    status: Literal["ACCEPTED", "DECLINED"]
