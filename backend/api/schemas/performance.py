import uuid
from pydantic import BaseModel
from typing import Optional

class SessionCreate(BaseModel):
    setlist_id: uuid.UUID

class SessionJoinOrCreate(BaseModel):
    setlist_id: uuid.UUID
    force_as_leader: bool = False

class SessionUpdate(BaseModel):
    current_set_id: Optional[uuid.UUID] = None
    current_song_id: Optional[uuid.UUID] = None

class LeadershipResponse(BaseModel):
    response: str
