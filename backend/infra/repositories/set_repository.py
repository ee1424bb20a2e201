import uuid
from typing import List, Optional, Tuple
from sqlmodel import Session, select, func
from datetime import datetime

from domain.models.setlist import SetlistSet, SetSong
from domain.models.song import Song
from domain.models.performance import PerformanceSession
from utils.retry import with_retry

class SetRepository:
    """sets / set_songs を扱うリポジトリ。書き込み系は flush のみで、commit はサービス側で行う"""

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, set_id: uuid.UUID) -> Optional[SetlistSet]:
        return self.session.get(SetlistSet, set_id)

    def find_by_setlist(self, setlist_id: uuid.UUID) -> List[SetlistSet]:
        query = (
            select(SetlistSet)
            .where(SetlistSet.setlist_id == setlist_id)
            .order_by(SetlistSet.set_order)
        )
        return with_retry(lambda: self.session.exec(query).all())

    def max_set_order(self, setlist_id: uuid.UUID) -> int:
        result = self.session.exec(
            select(func.max(SetlistSet.set_order)).where(SetlistSet.setlist_id == setlist_id)
        ).first()
        return result or 0

    def add(self, set_: SetlistSet) -> SetlistSet:
        self.session.add(set_)
        self.session.flush()
        return set_

    def get_songs(self, set_id: uuid.UUID) -> List[Tuple[SetSong, Song]]:
        query = (
            select(SetSong, Song)
            .where(SetSong.set_id == set_id)
            .where(SetSong.song_id == Song.id)
            .order_by(SetSong.song_order)
        )
        return with_retry(lambda: self.session.exec(query).all())

    def get_set_songs(self, set_id: uuid.UUID) -> List[SetSong]:
        return self.session.exec(
            select(SetSong).where(SetSong.set_id == set_id).order_by(SetSong.song_order)
        ).all()

    def find_song_placements(
        self,
        setlist_id: uuid.UUID,
        song_ids: List[uuid.UUID],
        exclude_set_id: Optional[uuid.UUID] = None,
    ) -> List[Tuple[Song, SetlistSet]]:
        """同じセットリスト内の他のセットに既に入っている楽曲を (楽曲, セット) で返す"""
        if not song_ids:
            return []
        query = (
            select(Song, SetlistSet)
            .join(SetSong, SetSong.song_id == Song.id)
            .join(SetlistSet, SetlistSet.id == SetSong.set_id)
            .where(SetlistSet.setlist_id == setlist_id)
            .where(SetSong.song_id.in_(song_ids))
        )
        if exclude_set_id:
            query = query.where(SetlistSet.id != exclude_set_id)
        query = query.order_by(SetlistSet.set_order, SetSong.song_order)
        return self.session.exec(query).all()

    def clear_songs(self, set_id: uuid.UUID):
        for row in self.get_set_songs(set_id):
            self.session.delete(row)
        self.session.flush()

    def add_songs(self, set_id: uuid.UUID, songs: List[Tuple[uuid.UUID, int]]):
        for song_id, song_order in songs:
            self.session.add(SetSong(set_id=set_id, song_id=song_id, song_order=song_order))
        self.session.flush()

    def renumber_songs(self, set_id: uuid.UUID):
        for i, row in enumerate(self.get_set_songs(set_id), start=1):
            if row.song_order != i:
                row.song_order = i
                self.session.add(row)
        self.session.flush()

    def renumber_sets(self, setlist_id: uuid.UUID):
        sets = self.session.exec(
            select(SetlistSet).where(SetlistSet.setlist_id == setlist_id).order_by(SetlistSet.set_order)
        ).all()
        for i, s in enumerate(sets, start=1):
            if s.set_order != i:
                s.set_order = i
                self.session.add(s)
        self.session.flush()

    def delete(self, set_: SetlistSet):
        self.clear_songs(set_.id)
        sessions = self.session.exec(
            select(PerformanceSession).where(PerformanceSession.current_set_id == set_.id)
        ).all()
        for perf in sessions:
            perf.current_set_id = None
            perf.updated_at = datetime.now()
            self.session.add(perf)
        self.session.flush()
        self.session.delete(set_)
        self.session.flush()
