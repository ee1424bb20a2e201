import uuid
from fastapi import APIRouter, Depends, Response
from sqlmodel import Session

from infra.database.connection import get_session
from domain.models.user import User, EDITOR
from api.deps import require_level
from api.schemas.songs import SongCreate, SongUpdate
from app.services.song_app_service import SongAppService

router = APIRouter()

@router.get("/api/songs")
def get_songs(session: Session = Depends(get_session)):
    service = SongAppService(session)
    return service.get_all_songs()

@router.get("/api/songs/{song_id}")
def get_song(song_id: uuid.UUID, session: Session = Depends(get_session)):
    service = SongAppService(session)
    return service.get_song_by_id(song_id)

@router.post("/api/songs", status_code=201)
def create_song(
    song: SongCreate,
    user: User = Depends(require_level(EDITOR)),
    session: Session = Depends(get_session),
):
    service = SongAppService(session)
    return service.create_song(song)

@router.put("/api/songs/{song_id}")
def update_song(
    song_id: uuid.UUID,
    song: SongUpdate,
    user: User = Depends(require_level(EDITOR)),
    session: Session = Depends(get_session),
):
    service = SongAppService(session)
    return service.update_song(song_id, song)

@router.delete("/api/songs/{song_id}", status_code=204)
def delete_song(
    song_id: uuid.UUID,
    user: User = Depends(require_level(EDITOR)),
    session: Session = Depends(get_session),
):
    service = SongAppService(session)
    service.delete_song(song_id)
    return Response(status_code=204)
