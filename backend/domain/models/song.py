import uuid
from typing import Optional
from datetime import datetime
from sqlmodel import Field, SQLModel

class Song(SQLModel, table=True):
    __tablename__ = "songs"
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    original_artist: str = Field(index=True)
    title: str = Field(index=True)
    key_signature: Optional[str] = None
    lyrics: Optional[str] = None  # rich HTML from the editor
    performance_note: Optional[str] = None
    tempo: Optional[int] = None

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
