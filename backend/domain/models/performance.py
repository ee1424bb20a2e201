import uuid
from typing import Optional
from datetime import datetime
from sqlmodel import Field, SQLModel

# leadership_requests.status
PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"
CANCELLED = "cancelled"

class PerformanceSession(SQLModel, table=True):
    __tablename__ = "performance_sessions"
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    setlist_id: uuid.UUID = Field(foreign_key="setlists.id", index=True)
    leader_id: uuid.UUID = Field(foreign_key="users.id")
    current_set_id: Optional[uuid.UUID] = Field(default=None, foreign_key="sets.id")
    current_song_id: Optional[uuid.UUID] = Field(default=None, foreign_key="songs.id")
    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

class SessionParticipant(SQLModel, table=True):
    __tablename__ = "session_participants"
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    session_id: uuid.UUID = Field(foreign_key="performance_sessions.id", index=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)
    is_active: bool = Field(default=True)

    joined_at: datetime = Field(default_factory=datetime.now)

class LeadershipRequest(SQLModel, table=True):
    __tablename__ = "leadership_requests"
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    session_id: uuid.UUID = Field(foreign_key="performance_sessions.id", index=True)
    requesting_user_id: uuid.UUID = Field(foreign_key="users.id")
    requesting_user_name: Optional[str] = None
    status: str = Field(default=PENDING, index=True)
    expires_at: datetime
    responded_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=datetime.now)
