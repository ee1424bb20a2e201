import uuid
from typing import List, Optional, Dict
from sqlmodel import Session, select, or_, func
from datetime import datetime

from domain.models.setlist import Setlist, SetlistSet, SetSong
from domain.models.performance import PerformanceSession, SessionParticipant, LeadershipRequest
from utils.retry import with_retry

class SetlistRepository:
    def __init__(self, session: Session):
        self.session = session

    def find_all(self, user_id: Optional[uuid.UUID] = None) -> List[Setlist]:
        """ログイン中なら自分のセットリスト + 公開セットリスト、未ログインなら公開のみ"""
        query = select(Setlist)
        if user_id:
            query = query.where(or_(Setlist.user_id == user_id, Setlist.is_public == True))  # noqa: E712
        else:
            query = query.where(Setlist.is_public == True)  # noqa: E712
        query = query.order_by(Setlist.name)
        return with_retry(lambda: self.session.exec(query).all())

    def get_by_id(self, setlist_id: uuid.UUID) -> Optional[Setlist]:
        return self.session.get(Setlist, setlist_id)

    def find_by_name(
        self, user_id: uuid.UUID, name: str, exclude_id: Optional[uuid.UUID] = None
    ) -> Optional[Setlist]:
        query = select(Setlist).where(Setlist.user_id == user_id).where(Setlist.name == name)
        if exclude_id:
            query = query.where(Setlist.id != exclude_id)
        return self.session.exec(query).first()

    def add(self, setlist: Setlist) -> Setlist:
        # commitせずにflushのみ (セット作成と同一トランザクションにするため)
        self.session.add(setlist)
        self.session.flush()
        return setlist

    def update(self, setlist: Setlist) -> Setlist:
        setlist.updated_at = datetime.now()
        self.session.add(setlist)
        self.session.commit()
        self.session.refresh(setlist)
        return setlist

    def get_sets(self, setlist_id: uuid.UUID) -> List[SetlistSet]:
        query = (
            select(SetlistSet)
            .where(SetlistSet.setlist_id == setlist_id)
            .order_by(SetlistSet.set_order)
        )
        return with_retry(lambda: self.session.exec(query).all())

    def get_song_counts(self, setlist_id: uuid.UUID) -> Dict[uuid.UUID, int]:
        query = (
            select(SetSong.set_id, func.count(SetSong.id))
            .join(SetlistSet, SetlistSet.id == SetSong.set_id)
            .where(SetlistSet.setlist_id == setlist_id)
            .group_by(SetSong.set_id)
        )
        return {set_id: count for set_id, count in self.session.exec(query).all()}

    def delete_cascade(self, setlist: Setlist):
        """
        セットリストと、その配下のセット・セット内楽曲・パフォーマンスセッション
        (参加者とリーダー交代リクエストを含む) を削除する。
        commitは呼び出し側で行う。
        """
        sessions = self.session.exec(
            select(PerformanceSession).where(PerformanceSession.setlist_id == setlist.id)
        ).all()
        for perf in sessions:
            for model in (SessionParticipant, LeadershipRequest):
                for row in self.session.exec(select(model).where(model.session_id == perf.id)).all():
                    self.session.delete(row)
        self.session.flush()
        for perf in sessions:
            self.session.delete(perf)
        self.session.flush()

        sets = self.session.exec(select(SetlistSet).where(SetlistSet.setlist_id == setlist.id)).all()
        for s in sets:
            for row in self.session.exec(select(SetSong).where(SetSong.set_id == s.id)).all():
                self.session.delete(row)
        self.session.flush()
        for s in sets:
            self.session.delete(s)
        self.session.flush()

        self.session.delete(setlist)
        self.session.flush()
