import uuid
from pydantic import BaseModel, Field
from typing import List, Optional, Literal

class SongRef(BaseModel):
    song_id: uuid.UUID
    song_order: Optional[int] = None

class SetPayload(BaseModel):
    name: Optional[str] = None
    songs: List[SongRef] = Field(default_factory=list)

class SetlistCreate(BaseModel):
    name: Optional[str] = None
    is_public: bool = False
    sets: List[SetPayload] = Field(default_factory=list)

class SetlistUpdate(BaseModel):
    name: Optional[str] = None
    is_public: Optional[bool] = None

class SetCreate(BaseModel):
    name: Optional[str] = None
    setlist_id: Optional[uuid.UUID] = None
    songs: List[SongRef] = Field(default_factory=list)

class SetUpdate(BaseModel):
    name: Optional[str] = None
    songs: Optional[List[SongRef]] = None

class SetFromSource(BaseModel):
    source_type: Literal["template", "collection"]
    source_id: uuid.UUID
    name: Optional[str] = None

class SetOrderUpdate(BaseModel):
    set_ids: List[uuid.UUID]

class DuplicateCheckRequest(BaseModel):
    song_ids: List[uuid.UUID]
    exclude_set_id: Optional[uuid.UUID] = None

class MoveSongsRequest(BaseModel):
    song_ids: List[uuid.UUID]
    from_set_id: uuid.UUID
