import uuid
from typing import Optional
from fastapi import Depends, Header
from sqlmodel import Session

from infra.database.connection import get_session
from domain.models.user import User, MEMBER
from domain.exceptions import AuthenticationError, PermissionDeniedError

# 認証はフロントエンド側 (ホスト型Auth) で行い、APIには X-User-Id でユーザーIDが渡される

def _resolve_user(x_user_id: Optional[str], session: Session) -> Optional[User]:
    if not x_user_id:
        return None
    try:
        user_id = uuid.UUID(x_user_id)
    except ValueError:
        raise AuthenticationError("Invalid user id")
    user = session.get(User, user_id)
    if not user:
        raise AuthenticationError("Unknown user")
    return user

def get_optional_user(
    x_user_id: Optional[str] = Header(default=None),
    session: Session = Depends(get_session),
) -> Optional[User]:
    return _resolve_user(x_user_id, session)

def get_current_user(
    x_user_id: Optional[str] = Header(default=None),
    session: Session = Depends(get_session),
) -> User:
    user = _resolve_user(x_user_id, session)
    if not user:
        raise AuthenticationError("Authentication required")
    return user

def require_level(level: int = MEMBER):
    """user_level が level 以上のユーザーのみ許可する依存関係を作る"""
    def dependency(user: User = Depends(get_current_user)) -> User:
        if user.user_level < level:
            raise PermissionDeniedError("You do not have permission to perform this action")
        return user
    return dependency
