from typing import Literal

from pydantic import Field

from pda.schemas.common import CamelModel, SteamId, Username, UtcDatetime

Faction = Literal[
    "LONER",
    "UKM",
    "ECOLOGISTS",
    "MERCS",
    "CLEAR_SKY",
    "BROTHERHOOD",
    "DUTY",
    "FREEDOM",
    "MONOLITH",
    "RENEGADES",
]


class RegisterRequest(CamelModel):
    username: Username
    password: str = Field(min_length=6, max_length=128)
    steam_id: SteamId
    faction: Faction | None = None


class LoginRequest(CamelModel):
    username: str = Field(min_length=1, max_length=40)
    password: str = Field(min_length=1, max_length=128)


class UserRead(CamelModel):
    id: str
    username: str
    steam_id: str
    faction: str
    is_online: bool = False
    last_login: UtcDatetime | None = None
    created_at: UtcDatetime


class AuthResponse(CamelModel):
    token: str
    user: UserRead
