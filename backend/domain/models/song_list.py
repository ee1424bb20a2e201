import uuid
from datetime import datetime
from sqlmodel import Field, SQLModel

# Reusable ordered song lists that are not tied to a setlist.

class SetTemplate(SQLModel, table=True):
    __tablename__ = "set_templates"
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str
    is_public: bool = Field(default=False)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

class SetTemplateSong(SQLModel, table=True):
    __tablename__ = "set_template_songs"
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    set_template_id: uuid.UUID = Field(foreign_key="set_templates.id", index=True)
    song_id: uuid.UUID = Field(foreign_key="songs.id", index=True)
    song_order: int

class SongCollection(SQLModel, table=True):
    __tablename__ = "song_collections"
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str
    is_public: bool = Field(default=False)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

class SongCollectionSong(SQLModel, table=True):
    __tablename__ = "song_collection_songs"
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    song_collection_id: uuid.UUID = Field(foreign_key="song_collections.id", index=True)
    song_id: uuid.UUID = Field(foreign_key="songs.id", index=True)
    song_order: int
