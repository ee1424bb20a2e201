import uuid
from typing import List, Optional, Dict, Any
from datetime import datetime, timedelta
from sqlmodel import Session

from config import settings
from domain.models.user import User, ADMIN
from domain.models.song import Song
from domain.models.setlist import SetlistSet
from domain.models.performance import (
    PerformanceSession,
    LeadershipRequest,
    PENDING,
    APPROVED,
    REJECTED,
)
from domain.exceptions import ValidationError, NotFoundError, ConflictError, PermissionDeniedError
from infra.repositories.performance_repository import PerformanceRepository
from infra.repositories.setlist_repository import SetlistRepository
from infra.repositories.set_repository import SetRepository
from infra.repositories.user_repository import UserRepository
from app.services.realtime_service import make_event, INSERT, UPDATE
from utils.logger import get_logger

logger = get_logger(__name__)

SESSIONS = "performance_sessions"
PARTICIPANTS = "session_participants"
LEADERSHIP_REQUESTS = "leadership_requests"

class PerformanceAppService:
    """
    ライブ中のリーダー/フォロワー同期。
    書き込みのたびに self.events にリアルタイム配信用のイベントを積み、ルーター側が commit 後に配信する。
    """
    def __init__(self, session: Session):
        self.session = session
        self.repository = PerformanceRepository(session)
        self.setlist_repository = SetlistRepository(session)
        self.set_repository = SetRepository(session)
        self.user_repository = UserRepository(session)
        self.events: Dict[uuid.UUID, List[Dict[str, Any]]] = {}

    def _emit(self, session_id: uuid.UUID, table: str, event: str, row: Any):
        self.events.setdefault(session_id, []).append(make_event(table, event, row))

    def _commit(self):
        try:
            self.repository.commit()
        except Exception:
            self.repository.rollback()
            self.events.clear()
            raise

    def enrich(self, perf: Optional[PerformanceSession]) -> Optional[Dict[str, Any]]:
        """セッション行に setlist / leader / 現在のセット・曲の表示名を付与する"""
        if perf is None:
            return None
        # commit 後は属性が expire されているので読み直してから dump する
        self.session.refresh(perf)
        data = perf.model_dump()
        setlist = self.setlist_repository.get_by_id(perf.setlist_id)
        leader = self.user_repository.get_by_id(perf.leader_id)
        current_set = self.set_repository.get_by_id(perf.current_set_id) if perf.current_set_id else None
        current_song = self.session.get(Song, perf.current_song_id) if perf.current_song_id else None

        data["setlist_name"] = setlist.name if setlist else None
        data["leader_name"] = leader.name if leader else None
        data["current_set_name"] = current_set.name if current_set else None
        data["current_song_title"] = current_song.title if current_song else None
        data["current_song_artist"] = current_song.original_artist if current_song else None
        return data

    def _get_session(self, session_id: uuid.UUID) -> PerformanceSession:
        perf = self.repository.get_session(session_id)
        if not perf:
            raise NotFoundError("Performance session not found")
        return perf

    def _ensure_setlist(self, setlist_id: uuid.UUID):
        if not self.setlist_repository.get_by_id(setlist_id):
            raise NotFoundError("Setlist not found")

    # --- session lifecycle ---

    def create_session(self, setlist_id: uuid.UUID, user: User) -> Dict[str, Any]:
        self._ensure_setlist(setlist_id)
        sets = self.set_repository.find_by_setlist(setlist_id)
        if not sets:
            raise ValidationError("Setlist has no sets")
        first_set = sets[0]
        first_songs = self.set_repository.get_songs(first_set.id)
        first_song = first_songs[0][1] if first_songs else None

        # 既存のアクティブセッションは後勝ちで終了させる (ロックはしない)
        for old in self.repository.find_active_sessions(setlist_id):
            old.is_active = False
            self.repository.save_session(old)
            for participant in self.repository.deactivate_participants(old.id):
                self._emit(old.id, PARTICIPANTS, UPDATE, participant)
            self._emit(old.id, SESSIONS, UPDATE, old)
            logger.info(f"Performance session {old.id} superseded by new session for setlist {setlist_id}")

        perf = self.repository.save_session(PerformanceSession(
            setlist_id=setlist_id,
            leader_id=user.id,
            current_set_id=first_set.id,
            current_song_id=first_song.id if first_song else None,
            is_active=True,
        ))
        self._emit(perf.id, SESSIONS, INSERT, perf)
        self._commit()

        logger.info(f"Performance session created: {perf.id} (setlist {setlist_id}, leader {user.id})")
        return self.enrich(perf)

    def get_active_session(self, setlist_id: uuid.UUID) -> Optional[Dict[str, Any]]:
        return self.enrich(self.repository.get_active_session(setlist_id))

    def get_session(self, session_id: uuid.UUID) -> Dict[str, Any]:
        return self.enrich(self._get_session(session_id))

    def get_or_create_session(self, setlist_id: uuid.UUID, user: User, force_as_leader: bool = False) -> Dict[str, Any]:
        active = self.repository.get_active_session(setlist_id)
        if active:
            return {
                "session": self.enrich(active),
                "is_new_session": False,
                "is_leader": active.leader_id == user.id,
            }
        if not force_as_leader:
            return {"session": None, "is_new_session": False, "is_leader": False}
        return {
            "session": self.create_session(setlist_id, user),
            "is_new_session": True,
            "is_leader": True,
        }

    def join_session(self, setlist_id: uuid.UUID, user: User) -> Dict[str, Any]:
        active = self.repository.get_active_session(setlist_id)
        if not active:
            raise NotFoundError("No active performance session found")

        participant = self.repository.upsert_participant(active.id, user.id, is_active=True)
        self._emit(active.id, PARTICIPANTS, UPDATE, participant)
        self._commit()
        logger.info(f"User {user.id} joined performance session {active.id}")
        return self.enrich(active)

    def leave_session(self, session_id: uuid.UUID, user: User):
        participant = self.repository.get_participant(session_id, user.id)
        if not participant:
            logger.warning(f"Leave requested for session {session_id} by non-participant {user.id}")
            return
        participant.is_active = False
        self.session.add(participant)
        self._emit(session_id, PARTICIPANTS, UPDATE, participant)
        self._commit()
        logger.info(f"User {user.id} left performance session {session_id}")

    def get_session_followers(self, session_id: uuid.UUID) -> List[Dict[str, Any]]:
        self._get_session(session_id)
        user_ids = [p.user_id for p in self.repository.find_participants(session_id)]
        return [
            {"id": u.id, "name": u.name, "email": u.email, "role": u.role}
            for u in self.user_repository.get_by_ids(user_ids)
        ]

    def update_session(
        self,
        session_id: uuid.UUID,
        user: User,
        current_set_id: Optional[uuid.UUID] = None,
        current_song_id: Optional[uuid.UUID] = None,
    ) -> Dict[str, Any]:
        perf = self._get_session(session_id)
        if perf.leader_id != user.id:
            raise PermissionDeniedError("Only the session leader can change the current song")
        if not perf.is_active:
            raise ValidationError("Performance session is not active")

        previous_set_id = perf.current_set_id
        target_set_id = current_set_id or previous_set_id
        if current_set_id is not None:
            set_: Optional[SetlistSet] = self.set_repository.get_by_id(current_set_id)
            if not set_ or set_.setlist_id != perf.setlist_id:
                raise ValidationError("Set does not belong to this setlist")
            perf.current_set_id = current_set_id
        if current_song_id is not None:
            song_ids = {song.id for _, song in self.set_repository.get_songs(target_set_id)} if target_set_id else set()
            if current_song_id not in song_ids:
                raise ValidationError("Song does not belong to the current set")
            perf.current_song_id = current_song_id
        elif current_set_id is not None and current_set_id != previous_set_id:
            # セットだけ変わった場合はそのセットの1曲目に合わせる
            songs = self.set_repository.get_songs(current_set_id)
            perf.current_song_id = songs[0][1].id if songs else None

        self.repository.save_session(perf)
        self._emit(perf.id, SESSIONS, UPDATE, perf)
        self._commit()
        return self.enrich(perf)

    def end_session(self, session_id: uuid.UUID, user: User):
        perf = self._get_session(session_id)
        if perf.leader_id != user.id and user.user_level < ADMIN:
            raise PermissionDeniedError("Only the session leader or an administrator can end the session")

        for participant in self.repository.deactivate_participants(session_id):
            self._emit(session_id, PARTICIPANTS, UPDATE, participant)
        perf.is_active = False
        self.repository.save_session(perf)
        self._emit(session_id, SESSIONS, UPDATE, perf)
        self._commit()
        logger.info(f"Performance session ended: {session_id}")

    # --- leadership ---

    def request_leadership(self, session_id: uuid.UUID, user: User) -> Dict[str, Any]:
        perf = self._get_session(session_id)
        if not perf.is_active:
            raise ValidationError("Performance session is not active")
        if perf.leader_id == user.id:
            raise ValidationError("You are already the leader of this session")

        self.repository.cancel_pending_requests(session_id, user.id)
        timeout = settings.LEADERSHIP_REQUEST_TIMEOUT_SECONDS
        req = self.repository.save_request(LeadershipRequest(
            session_id=session_id,
            requesting_user_id=user.id,
            requesting_user_name=user.name,
            status=PENDING,
            expires_at=datetime.now() + timedelta(seconds=timeout),
        ))
        self._emit(session_id, LEADERSHIP_REQUESTS, INSERT, req)
        self._commit()

        self.session.refresh(req)
        logger.info(f"Leadership requested by {user.id} for session {session_id}")
        data = req.model_dump()
        data["auto_approve_after"] = timeout
        return data

    def respond_to_leadership_request(self, request_id: uuid.UUID, response: str, user: User) -> LeadershipRequest:
        if response not in (APPROVED, REJECTED):
            raise ValidationError("Response must be 'approved' or 'rejected'")

        req = self.repository.get_request(request_id)
        if not req:
            raise NotFoundError("Leadership request not found")
        perf = self._get_session(req.session_id)
        if perf.leader_id != user.id:
            raise PermissionDeniedError("Only the current leader can respond to leadership requests")
        if not perf.is_active:
            raise ValidationError("Performance session is not active")
        if req.status != PENDING:
            raise ConflictError("Leadership request is no longer pending")

        req.status = response
        req.responded_at = datetime.now()
        self.repository.save_request(req)
        self._emit(perf.id, LEADERSHIP_REQUESTS, UPDATE, req)

        if response == APPROVED:
            previous_leader = perf.leader_id
            perf.leader_id = req.requesting_user_id
            self.repository.save_session(perf)
            self._emit(perf.id, SESSIONS, UPDATE, perf)

            # 旧リーダーはフォロワーとして参加、新リーダーは参加者から外す
            old = self.repository.upsert_participant(perf.id, previous_leader, is_active=True)
            self._emit(perf.id, PARTICIPANTS, UPDATE, old)
            new = self.repository.get_participant(perf.id, req.requesting_user_id)
            if new and new.is_active:
                new.is_active = False
                self.session.add(new)
                self._emit(perf.id, PARTICIPANTS, UPDATE, new)

        self._commit()
        self.session.refresh(req)
        logger.info(f"Leadership request {request_id} {response} (session {perf.id})")
        return req

    def force_takeover(self, session_id: uuid.UUID, user: User) -> Dict[str, Any]:
        # 同時に複数の管理者が実行した場合は最後の書き込みが残る
        perf = self._get_session(session_id)
        if user.user_level < ADMIN:
            raise PermissionDeniedError("Only administrators can take over a session")
        if not perf.is_active:
            raise ValidationError("Performance session is not active")

        previous_leader = perf.leader_id
        perf.leader_id = user.id
        self.repository.save_session(perf)
        self._emit(perf.id, SESSIONS, UPDATE, perf)
        if previous_leader != user.id:
            old = self.repository.upsert_participant(perf.id, previous_leader, is_active=True)
            self._emit(perf.id, PARTICIPANTS, UPDATE, old)
        self._commit()

        logger.info(f"Session {session_id} taken over by {user.id} (previous leader {previous_leader})")
        return self.enrich(perf)

    def cleanup_expired_requests(self) -> int:
        removed = self.repository.delete_expired_requests(datetime.now())
        self._commit()
        if removed:
            logger.info(f"Removed {removed} expired leadership requests")
        return removed

    # --- data ---

    def get_performance_data(self, setlist_id: uuid.UUID) -> Dict[str, Any]:
        """パフォーマンス画面で使うセットリスト全体 (歌詞・演奏メモ込み) を1回で返す"""
        setlist = self.setlist_repository.get_by_id(setlist_id)
        if not setlist:
            raise NotFoundError("Setlist not found")

        sets = []
        for s in self.set_repository.find_by_setlist(setlist_id):
            songs = []
            for set_song, song in self.set_repository.get_songs(s.id):
                song_data = song.model_dump()
                song_data["song_order"] = set_song.song_order
                songs.append(song_data)
            sets.append({"id": s.id, "name": s.name, "set_order": s.set_order, "songs": songs})

        data = setlist.model_dump()
        data["sets"] = sets
        return data
