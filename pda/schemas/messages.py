from pydantic import Field

from pda.schemas.common import CamelModel, UtcDatetime
from pda.schemas.users import UserBrief


class MessageCreateRequest(CamelModel):
    content: str = Field(min_length=1)
    recipient_id: str | None = Field(default=None, min_length=1, max_length=32)
    is_anonymous: bool = False


class MessageRead(CamelModel):
    id: str
    user_id: str
    recipient_id: str | None = None
    author: UserBrief | None = None
    recipient: UserBrief | None = None
    content: str
    is_anonymous: bool
    created_at: UtcDatetime


class GlobalMessagesMetadata(CamelModel):
    total_messages: int
    current_page: int
    total_pages: int
    limit: int


class GlobalMessagesPage(CamelModel):
    metadata: GlobalMessagesMetadata
    messages: list[MessageRead]


class DirectMessagesPage(CamelModel):
    page: int
    limit: int
    total_messages: int
    total_pages: int
    messages: list[MessageRead]
