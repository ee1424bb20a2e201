import uuid
from typing import Optional
from fastapi import APIRouter, Depends, Response
from sqlmodel import Session

from infra.database.connection import get_session
from domain.models.user import User
from api.deps import get_current_user, get_optional_user
from api.schemas.song_lists import SongListCreate, SongListUpdate
from app.services.song_list_app_service import SetTemplateAppService

router = APIRouter()

@router.get("/api/set-templates")
def get_set_templates(
    user: Optional[User] = Depends(get_optional_user),
    session: Session = Depends(get_session),
):
    service = SetTemplateAppService(session)
    return service.get_all(user)

@router.get("/api/set-templates/{template_id}")
def get_set_template(template_id: uuid.UUID, session: Session = Depends(get_session)):
    service = SetTemplateAppService(session)
    return service.get_by_id(template_id)

@router.post("/api/set-templates", status_code=201)
def create_set_template(
    data: SongListCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = SetTemplateAppService(session)
    return service.create(data, user)

@router.put("/api/set-templates/{template_id}")
def update_set_template(
    template_id: uuid.UUID,
    data: SongListUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = SetTemplateAppService(session)
    return service.update(template_id, data, user)

@router.delete("/api/set-templates/{template_id}", status_code=204)
def delete_set_template(
    template_id: uuid.UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = SetTemplateAppService(session)
    service.delete(template_id, user)
    return Response(status_code=204)
