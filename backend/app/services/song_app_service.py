import uuid
from typing import List
from sqlmodel import Session

from domain.models.song import Song
from domain.exceptions import ValidationError, NotFoundError, ConflictError
from infra.repositories.song_repository import SongRepository
from api.schemas.songs import SongCreate, SongUpdate
from utils.logger import get_logger

logger = get_logger(__name__)

class SongAppService:
    def __init__(self, session: Session):
        self.session = session
        self.repository = SongRepository(session)

    def get_all_songs(self) -> List[Song]:
        return self.repository.find_all()

    def get_song_by_id(self, song_id: uuid.UUID) -> Song:
        song = self.repository.get_by_id(song_id)
        if not song:
            raise NotFoundError("Song not found")
        return song

    def _clean(self, data: SongCreate):
        artist = (data.original_artist or "").strip()
        title = (data.title or "").strip()
        if not artist or not title:
            raise ValidationError("Artist and Title are required.")
        return artist, title

    def create_song(self, data: SongCreate) -> Song:
        artist, title = self._clean(data)
        # 存在チェック→INSERT の間に競合し得るが、DB側に一意制約は置いていない
        if self.repository.find_by_title_and_artist(title, artist):
            raise ConflictError("A song with this title and artist already exists.")

        song = Song.model_validate(data.model_dump())
        song.original_artist = artist
        song.title = title
        song = self.repository.create(song)
        logger.info(f"Song created: {song.title} / {song.original_artist} ({song.id})")
        return song

    def update_song(self, song_id: uuid.UUID, data: SongUpdate) -> Song:
        song = self.get_song_by_id(song_id)
        artist, title = self._clean(data)
        if self.repository.find_by_title_and_artist(title, artist, exclude_id=song_id):
            raise ConflictError("Another song with this title and artist already exists.")

        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(song, key, value)
        song.original_artist = artist
        song.title = title
        return self.repository.update(song)

    def delete_song(self, song_id: uuid.UUID):
        song = self.get_song_by_id(song_id)
        try:
            self.repository.delete_references(song.id)
            self.repository.delete(song)
        except Exception:
            self.session.rollback()
            raise
        logger.info(f"Song deleted: {song_id}")
