from pda.schemas.common import CamelModel, NoteBody, NoteTitle, UtcDatetime


class NoteCreateRequest(CamelModel):
    title: NoteTitle
    content: NoteBody


class NoteUpdateRequest(CamelModel):
    title: NoteTitle | None = None
    content: NoteBody | None = None


class NoteRead(CamelModel):
    id: str
    user_id: str
    title: str
    content: str
    created_at: UtcDatetime
    updated_at: UtcDatetime
