from pydantic import Field

from pda.schemas.auth import Faction, UserRead
from pda.schemas.common import CamelModel, SteamId


class UserBrief(CamelModel):
    id: str
    username: str
    faction: str
    is_online: bool = False


class UserDetailRead(UserRead):
    friends: list[UserBrief] = Field(default_factory=list)


class ProfileUpdateRequest(CamelModel):
    faction: Faction | None = None
    steam_id: SteamId | None = None
