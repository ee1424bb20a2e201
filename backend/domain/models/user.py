import uuid
from typing import Optional
from datetime import datetime
from sqlmodel import Field, SQLModel

# user_level tiers
MEMBER = 1
EDITOR = 2
ADMIN = 3
USER_LEVELS = (MEMBER, EDITOR, ADMIN)

class User(SQLModel, table=True):
    __tablename__ = "users"
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    role: Optional[str] = Field(default="")  # instrument / role in the band
    user_level: int = Field(default=MEMBER)

    created_at: datetime = Field(default_factory=datetime.now)
