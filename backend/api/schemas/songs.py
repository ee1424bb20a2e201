from pydantic import BaseModel
from typing import Optional

# 必須項目もOptionalにしておき、未入力時はサービス側で400を返す

class SongCreate(BaseModel):
    original_artist: Optional[str] = None
    title: Optional[str] = None
    key_signature: Optional[str] = None
    lyrics: Optional[str] = None
    performance_note: Optional[str] = None
    tempo: Optional[int] = None

class SongUpdate(SongCreate):
    pass
