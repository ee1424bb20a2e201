import uuid
from typing import List, Optional
from sqlmodel import Session, select, desc
from datetime import datetime

from domain.models.performance import (
    PerformanceSession,
    SessionParticipant,
    LeadershipRequest,
    PENDING,
    CANCELLED,
)

class PerformanceRepository:
    def __init__(self, session: Session):
        self.session = session

    # --- sessions ---

    def get_session(self, session_id: uuid.UUID) -> Optional[PerformanceSession]:
        return self.session.get(PerformanceSession, session_id)

    def find_active_sessions(self, setlist_id: uuid.UUID) -> List[PerformanceSession]:
        query = (
            select(PerformanceSession)
            .where(PerformanceSession.setlist_id == setlist_id)
            .where(PerformanceSession.is_active == True)  # noqa: E712
            .order_by(desc(PerformanceSession.created_at))
        )
        return self.session.exec(query).all()

    def get_active_session(self, setlist_id: uuid.UUID) -> Optional[PerformanceSession]:
        sessions = self.find_active_sessions(setlist_id)
        return sessions[0] if sessions else None

    def save_session(self, perf: PerformanceSession) -> PerformanceSession:
        perf.updated_at = datetime.now()
        self.session.add(perf)
        self.session.flush()
        return perf

    # --- participants ---

    def get_participant(self, session_id: uuid.UUID, user_id: uuid.UUID) -> Optional[SessionParticipant]:
        query = (
            select(SessionParticipant)
            .where(SessionParticipant.session_id == session_id)
            .where(SessionParticipant.user_id == user_id)
        )
        return self.session.exec(query).first()

    def find_participants(self, session_id: uuid.UUID, active_only: bool = True) -> List[SessionParticipant]:
        query = select(SessionParticipant).where(SessionParticipant.session_id == session_id)
        if active_only:
            query = query.where(SessionParticipant.is_active == True)  # noqa: E712
        return self.session.exec(query.order_by(SessionParticipant.joined_at)).all()

    def upsert_participant(self, session_id: uuid.UUID, user_id: uuid.UUID, is_active: bool = True) -> SessionParticipant:
        # (session_id, user_id) は一意。既存行があれば更新する
        participant = self.get_participant(session_id, user_id)
        if participant:
            participant.is_active = is_active
            if is_active:
                participant.joined_at = datetime.now()
        else:
            participant = SessionParticipant(session_id=session_id, user_id=user_id, is_active=is_active)
        self.session.add(participant)
        self.session.flush()
        return participant

    def deactivate_participants(self, session_id: uuid.UUID) -> List[SessionParticipant]:
        changed = []
        for participant in self.find_participants(session_id):
            participant.is_active = False
            self.session.add(participant)
            changed.append(participant)
        self.session.flush()
        return changed

    # --- leadership requests ---

    def get_request(self, request_id: uuid.UUID) -> Optional[LeadershipRequest]:
        return self.session.get(LeadershipRequest, request_id)

    def find_pending_requests(
        self, session_id: uuid.UUID, requesting_user_id: Optional[uuid.UUID] = None
    ) -> List[LeadershipRequest]:
        query = (
            select(LeadershipRequest)
            .where(LeadershipRequest.session_id == session_id)
            .where(LeadershipRequest.status == PENDING)
        )
        if requesting_user_id:
            query = query.where(LeadershipRequest.requesting_user_id == requesting_user_id)
        return self.session.exec(query.order_by(LeadershipRequest.created_at)).all()

    def cancel_pending_requests(self, session_id: uuid.UUID, requesting_user_id: uuid.UUID) -> int:
        pending = self.find_pending_requests(session_id, requesting_user_id)
        for req in pending:
            req.status = CANCELLED
            req.responded_at = datetime.now()
            self.session.add(req)
        self.session.flush()
        return len(pending)

    def save_request(self, req: LeadershipRequest) -> LeadershipRequest:
        self.session.add(req)
        self.session.flush()
        return req

    def delete_expired_requests(self, now: datetime) -> int:
        expired = self.session.exec(
            select(LeadershipRequest)
            .where(LeadershipRequest.status == PENDING)
            .where(LeadershipRequest.expires_at < now)
        ).all()
        for req in expired:
            self.session.delete(req)
        self.session.flush()
        return len(expired)

    def commit(self):
        self.session.commit()

    def rollback(self):
        self.session.rollback()
