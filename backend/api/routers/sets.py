import uuid
from fastapi import APIRouter, Depends, Response
from sqlmodel import Session

from infra.database.connection import get_session
from domain.models.user import User
from api.deps import get_current_user
from api.schemas.setlists import (
    SetCreate,
    SetUpdate,
    SetOrderUpdate,
    DuplicateCheckRequest,
    MoveSongsRequest,
)
from app.services.set_app_service import SetAppService

router = APIRouter()

@router.get("/api/setlists/{setlist_id}/sets")
def get_sets(setlist_id: uuid.UUID, session: Session = Depends(get_session)):
    service = SetAppService(session)
    return service.get_sets(setlist_id)

@router.put("/api/setlists/{setlist_id}/sets/order")
def reorder_sets(
    setlist_id: uuid.UUID,
    req: SetOrderUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = SetAppService(session)
    return service.reorder_sets(setlist_id, req.set_ids, user)

@router.post("/api/setlists/{setlist_id}/duplicates")
def check_duplicates(
    setlist_id: uuid.UUID,
    req: DuplicateCheckRequest,
    session: Session = Depends(get_session),
):
    service = SetAppService(session)
    return service.check_collection_duplicates(setlist_id, req.song_ids, req.exclude_set_id)

@router.get("/api/sets/{set_id}")
def get_set(set_id: uuid.UUID, session: Session = Depends(get_session)):
    service = SetAppService(session)
    return service.get_set_by_id(set_id)

@router.post("/api/sets", status_code=201)
def create_set(
    set_data: SetCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = SetAppService(session)
    return service.create_set(set_data, user)

@router.put("/api/sets/{set_id}")
def update_set(
    set_id: uuid.UUID,
    set_data: SetUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = SetAppService(session)
    return service.update_set(set_id, set_data, user)

@router.delete("/api/sets/{set_id}", status_code=204)
def delete_set(
    set_id: uuid.UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = SetAppService(session)
    service.delete_set(set_id, user)
    return Response(status_code=204)

@router.post("/api/sets/{to_set_id}/move-songs")
def move_songs(
    to_set_id: uuid.UUID,
    req: MoveSongsRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = SetAppService(session)
    return service.move_songs_between_sets(req.song_ids, req.from_set_id, to_set_id, user)
