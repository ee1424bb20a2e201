import uuid
from typing import List, Optional
from sqlmodel import Session

from domain.models.user import User, ADMIN, USER_LEVELS, MEMBER
from domain.exceptions import ValidationError, NotFoundError, ConflictError, PermissionDeniedError
from infra.repositories.user_repository import UserRepository
from api.schemas.users import UserCreate, UserUpdate
from utils.logger import get_logger

logger = get_logger(__name__)

class UserAppService:
    def __init__(self, session: Session):
        self.session = session
        self.repository = UserRepository(session)

    def get_users(self) -> List[User]:
        return self.repository.find_all()

    def get_user_by_id(self, user_id: uuid.UUID) -> User:
        user = self.repository.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def _validate_level(self, level: Optional[int]):
        if level is not None and level not in USER_LEVELS:
            raise ValidationError("user_level must be 1 (member), 2 (editor) or 3 (admin)")

    def create_user(self, data: UserCreate) -> User:
        name = (data.name or "").strip()
        email = (data.email or "").strip().lower()
        if not name or not email:
            raise ValidationError("Name and email are required")
        self._validate_level(data.user_level)
        if self.repository.get_by_email(email):
            raise ConflictError("A user with this email already exists")

        user = User(
            name=name,
            email=email,
            role=data.role or "",
            user_level=data.user_level or MEMBER,
        )
        user = self.repository.create(user)
        logger.info(f"User created: {user.email} (level {user.user_level})")
        return user

    def update_user(self, user_id: uuid.UUID, data: UserUpdate, actor: User) -> User:
        """管理者は全項目、本人は name / role のみ変更できる"""
        is_admin = actor.user_level >= ADMIN
        if not is_admin and actor.id != user_id:
            raise PermissionDeniedError("Only administrators can update other users")
        if not is_admin and data.user_level is not None:
            raise PermissionDeniedError("Only administrators can change user levels")

        user = self.get_user_by_id(user_id)
        changes = data.model_dump(exclude_unset=True)

        if "name" in changes:
            name = (data.name or "").strip()
            if not name:
                raise ValidationError("Name and email are required")
            user.name = name
        if "email" in changes:
            if not is_admin:
                raise PermissionDeniedError("Only administrators can change email addresses")
            email = (data.email or "").strip().lower()
            if not email:
                raise ValidationError("Name and email are required")
            if self.repository.get_by_email(email, exclude_id=user_id):
                raise ConflictError("A user with this email already exists")
            user.email = email
        if "role" in changes:
            user.role = data.role or ""
        if data.user_level is not None:
            self._validate_level(data.user_level)
            if user.user_level != data.user_level:
                logger.info(f"User level changed: {user.email} {user.user_level} -> {data.user_level}")
            user.user_level = data.user_level

        return self.repository.update(user)

    def delete_user(self, user_id: uuid.UUID, actor: User):
        if actor.id == user_id:
            raise ValidationError("You cannot delete your own account")
        user = self.get_user_by_id(user_id)
        self.repository.delete(user)
        logger.info(f"User deleted: {user_id}")
