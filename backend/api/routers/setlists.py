import uuid
import urllib.parse
from typing import Optional
from fastapi import APIRouter, Depends, Response
from sqlmodel import Session

from infra.database.connection import get_session
from domain.models.user import User
from api.deps import get_current_user, get_optional_user
from api.schemas.setlists import SetlistCreate, SetlistUpdate, SetFromSource
from app.services.setlist_app_service import SetlistAppService

router = APIRouter()

@router.get("/api/setlists")
def get_setlists(
    user: Optional[User] = Depends(get_optional_user),
    session: Session = Depends(get_session),
):
    service = SetlistAppService(session)
    return service.get_all_setlists(user)

@router.get("/api/setlists/{setlist_id}")
def get_setlist(setlist_id: uuid.UUID, session: Session = Depends(get_session)):
    service = SetlistAppService(session)
    return service.get_setlist_by_id(setlist_id)

@router.post("/api/setlists", status_code=201)
def create_setlist(
    setlist: SetlistCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = SetlistAppService(session)
    return service.create_setlist(setlist, user)

@router.put("/api/setlists/{setlist_id}")
def update_setlist(
    setlist_id: uuid.UUID,
    setlist: SetlistUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = SetlistAppService(session)
    return service.update_setlist(setlist_id, setlist, user)

@router.delete("/api/setlists/{setlist_id}", status_code=204)
def delete_setlist(
    setlist_id: uuid.UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = SetlistAppService(session)
    service.delete_setlist(setlist_id, user)
    return Response(status_code=204)

@router.post("/api/setlists/{setlist_id}/sets/from-template", status_code=201)
def create_set_from_template(
    setlist_id: uuid.UUID,
    req: SetFromSource,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """セットテンプレートまたはソングコレクションから新しいセットを作成する"""
    service = SetlistAppService(session)
    return service.create_set_from_source(setlist_id, req, user)

@router.get("/api/setlists/{setlist_id}/export/pdf")
def export_setlist_pdf(setlist_id: uuid.UUID, session: Session = Depends(get_session)):
    """
    印刷用のPDFをダウンロードする
    """
    service = SetlistAppService(session)
    filename, content = service.export_pdf(setlist_id)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{urllib.parse.quote(filename)}"}
    )
