import uuid
from typing import Optional
from fastapi import APIRouter, Depends, Response
from sqlmodel import Session

from infra.database.connection import get_session
from domain.models.user import User
from api.deps import get_current_user, get_optional_user
from api.schemas.song_lists import SongListCreate, SongListUpdate
from app.services.song_list_app_service import SongCollectionAppService

router = APIRouter()

@router.get("/api/song-collections")
def get_song_collections(
    user: Optional[User] = Depends(get_optional_user),
    session: Session = Depends(get_session),
):
    service = SongCollectionAppService(session)
    return service.get_all(user)

@router.get("/api/song-collections/{collection_id}")
def get_song_collection(collection_id: uuid.UUID, session: Session = Depends(get_session)):
    service = SongCollectionAppService(session)
    return service.get_by_id(collection_id)

@router.post("/api/song-collections", status_code=201)
def create_song_collection(
    data: SongListCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = SongCollectionAppService(session)
    return service.create(data, user)

@router.put("/api/song-collections/{collection_id}")
def update_song_collection(
    collection_id: uuid.UUID,
    data: SongListUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = SongCollectionAppService(session)
    return service.update(collection_id, data, user)

@router.delete("/api/song-collections/{collection_id}", status_code=204)
def delete_song_collection(
    collection_id: uuid.UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = SongCollectionAppService(session)
    service.delete(collection_id, user)
    return Response(status_code=204)
