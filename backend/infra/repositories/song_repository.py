import uuid
from typing import List, Optional
from sqlmodel import Session, select
from datetime import datetime

from domain.models.song import Song
from domain.models.setlist import SetSong
from domain.models.song_list import SetTemplateSong, SongCollectionSong
from domain.models.performance import PerformanceSession
from utils.retry import with_retry

class SongRepository:
    def __init__(self, session: Session):
        self.session = session

    def find_all(self) -> List[Song]:
        query = select(Song).order_by(Song.original_artist, Song.title)
        return with_retry(lambda: self.session.exec(query).all())

    def get_by_id(self, song_id: uuid.UUID) -> Optional[Song]:
        return self.session.get(Song, song_id)

    def find_by_title_and_artist(
        self, title: str, original_artist: str, exclude_id: Optional[uuid.UUID] = None
    ) -> Optional[Song]:
        query = select(Song).where(Song.title == title).where(Song.original_artist == original_artist)
        if exclude_id:
            query = query.where(Song.id != exclude_id)
        return self.session.exec(query).first()

    def create(self, song: Song) -> Song:
        self.session.add(song)
        self.session.commit()
        self.session.refresh(song)
        return song

    def update(self, song: Song) -> Song:
        song.updated_at = datetime.now()
        self.session.add(song)
        self.session.commit()
        self.session.refresh(song)
        return song

    def delete_references(self, song_id: uuid.UUID):
        # commitは呼び出し側でまとめて行う
        for model in (SetSong, SetTemplateSong, SongCollectionSong):
            for row in self.session.exec(select(model).where(model.song_id == song_id)).all():
                self.session.delete(row)
        sessions = self.session.exec(
            select(PerformanceSession).where(PerformanceSession.current_song_id == song_id)
        ).all()
        for s in sessions:
            s.current_song_id = None
            s.updated_at = datetime.now()
            self.session.add(s)
        self.session.flush()

    def delete(self, song: Song):
        self.session.delete(song)
        self.session.commit()
