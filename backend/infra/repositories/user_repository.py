import uuid
from typing import List, Optional
from sqlmodel import Session, select, desc

from domain.models.user import User
from utils.retry import with_retry

class UserRepository:
    def __init__(self, session: Session):
        self.session = session

    def find_all(self) -> List[User]:
        return with_retry(lambda: self.session.exec(select(User).order_by(desc(User.created_at))).all())

    def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_by_ids(self, user_ids: List[uuid.UUID]) -> List[User]:
        if not user_ids:
            return []
        return self.session.exec(select(User).where(User.id.in_(user_ids)).order_by(User.name)).all()

    def get_by_email(self, email: str, exclude_id: Optional[uuid.UUID] = None) -> Optional[User]:
        query = select(User).where(User.email == email)
        if exclude_id:
            query = query.where(User.id != exclude_id)
        return self.session.exec(query).first()

    def create(self, user: User) -> User:
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def update(self, user: User) -> User:
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def delete(self, user: User):
        self.session.delete(user)
        self.session.commit()
