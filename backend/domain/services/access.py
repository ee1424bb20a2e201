import uuid

from domain.models.user import User, ADMIN
from domain.exceptions import PermissionDeniedError


def can_manage(user: User, owner_id: uuid.UUID) -> bool:
    return user.id == owner_id or user.user_level >= ADMIN


def ensure_can_manage(user: User, owner_id: uuid.UUID, noun: str):
    """所有者か管理者でなければ PermissionDeniedError"""
    if not can_manage(user, owner_id):
        raise PermissionDeniedError(f"You do not have permission to modify this {noun}.")
