import uuid
from fastapi import APIRouter, Depends, Response
from sqlmodel import Session

from infra.database.connection import get_session
from domain.models.user import User, ADMIN
from api.deps import get_current_user, require_level
from api.schemas.users import UserCreate, UserUpdate
from app.services.user_app_service import UserAppService

router = APIRouter()

@router.get("/api/users/me")
def get_me(user: User = Depends(get_current_user)):
    return user

@router.get("/api/users")
def get_users(
    admin: User = Depends(require_level(ADMIN)),
    session: Session = Depends(get_session),
):
    service = UserAppService(session)
    return service.get_users()

@router.post("/api/users", status_code=201)
def create_user(
    data: UserCreate,
    admin: User = Depends(require_level(ADMIN)),
    session: Session = Depends(get_session),
):
    service = UserAppService(session)
    return service.create_user(data)

@router.put("/api/users/{user_id}")
def update_user(
    user_id: uuid.UUID,
    data: UserUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = UserAppService(session)
    return service.update_user(user_id, data, user)

@router.delete("/api/users/{user_id}", status_code=204)
def delete_user(
    user_id: uuid.UUID,
    admin: User = Depends(require_level(ADMIN)),
    session: Session = Depends(get_session),
):
    service = UserAppService(session)
    service.delete_user(user_id, admin)
    return Response(status_code=204)
