from pydantic import BaseModel, Field
from typing import List, Optional

from api.schemas.setlists import SongRef

class SongListCreate(BaseModel):
    name: Optional[str] = None
    is_public: bool = False
    songs: List[SongRef] = Field(default_factory=list)

class SongListUpdate(BaseModel):
    name: Optional[str] = None
    is_public: Optional[bool] = None
    songs: Optional[List[SongRef]] = None
