import uuid
from datetime import datetime
from sqlmodel import Field, SQLModel

class Setlist(SQLModel, table=True):
    __tablename__ = "setlists"
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str
    is_public: bool = Field(default=False)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

class SetlistSet(SQLModel, table=True):
    __tablename__ = "sets"
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str
    setlist_id: uuid.UUID = Field(foreign_key="setlists.id", index=True)
    set_order: int = Field(default=1)

    created_at: datetime = Field(default_factory=datetime.now)

class SetSong(SQLModel, table=True):
    __tablename__ = "set_songs"
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    set_id: uuid.UUID = Field(foreign_key="sets.id", index=True)
    song_id: uuid.UUID = Field(foreign_key="songs.id", index=True)
    song_order: int
