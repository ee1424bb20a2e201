import uuid
from typing import Any, Dict, List
from fastapi import APIRouter, BackgroundTasks, Depends, WebSocket, WebSocketDisconnect
from sqlmodel import Session

from infra.database.connection import get_session
from domain.models.user import User, ADMIN
from api.deps import get_current_user, require_level
from api.schemas.performance import (
    SessionCreate,
    SessionJoinOrCreate,
    SessionUpdate,
    LeadershipResponse,
)
from app.services.performance_app_service import PerformanceAppService
from app.services.realtime_service import hub, channel_name

router = APIRouter()

async def _publish(events: Dict[uuid.UUID, List[Dict[str, Any]]]):
    for session_id, items in events.items():
        await hub.publish(session_id, items)

def _schedule_publish(background_tasks: BackgroundTasks, service: PerformanceAppService):
    # commit済みの変更だけを、レスポンス送信後にイベントループ側で配信する
    events = dict(service.events)
    service.events.clear()
    if events:
        background_tasks.add_task(_publish, events)

@router.post("/api/performance/sessions", status_code=201)
def create_session(
    req: SessionCreate,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = PerformanceAppService(session)
    result = service.create_session(req.setlist_id, user)
    _schedule_publish(background_tasks, service)
    return result

@router.post("/api/performance/sessions/get-or-create")
def get_or_create_session(
    req: SessionJoinOrCreate,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = PerformanceAppService(session)
    result = service.get_or_create_session(req.setlist_id, user, req.force_as_leader)
    _schedule_publish(background_tasks, service)
    return result

@router.get("/api/performance/setlists/{setlist_id}/active")
def get_active_session(setlist_id: uuid.UUID, session: Session = Depends(get_session)):
    service = PerformanceAppService(session)
    return service.get_active_session(setlist_id)

@router.get("/api/performance/setlists/{setlist_id}/data")
def get_performance_data(setlist_id: uuid.UUID, session: Session = Depends(get_session)):
    service = PerformanceAppService(session)
    return service.get_performance_data(setlist_id)

@router.post("/api/performance/setlists/{setlist_id}/join")
def join_session(
    setlist_id: uuid.UUID,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = PerformanceAppService(session)
    result = service.join_session(setlist_id, user)
    _schedule_publish(background_tasks, service)
    return result

@router.get("/api/performance/sessions/{session_id}")
def get_session_by_id(session_id: uuid.UUID, session: Session = Depends(get_session)):
    service = PerformanceAppService(session)
    return service.get_session(session_id)

@router.put("/api/performance/sessions/{session_id}")
def update_session(
    session_id: uuid.UUID,
    req: SessionUpdate,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = PerformanceAppService(session)
    result = service.update_session(session_id, user, req.current_set_id, req.current_song_id)
    _schedule_publish(background_tasks, service)
    return result

@router.post("/api/performance/sessions/{session_id}/leave")
def leave_session(
    session_id: uuid.UUID,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = PerformanceAppService(session)
    service.leave_session(session_id, user)
    _schedule_publish(background_tasks, service)
    return {"status": "success"}

@router.post("/api/performance/sessions/{session_id}/end")
def end_session(
    session_id: uuid.UUID,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = PerformanceAppService(session)
    service.end_session(session_id, user)
    _schedule_publish(background_tasks, service)
    return {"status": "success"}

@router.get("/api/performance/sessions/{session_id}/followers")
def get_followers(session_id: uuid.UUID, session: Session = Depends(get_session)):
    service = PerformanceAppService(session)
    return service.get_session_followers(session_id)

@router.post("/api/performance/sessions/{session_id}/leadership-requests", status_code=201)
def request_leadership(
    session_id: uuid.UUID,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = PerformanceAppService(session)
    result = service.request_leadership(session_id, user)
    _schedule_publish(background_tasks, service)
    return result

@router.post("/api/performance/leadership-requests/cleanup")
def cleanup_expired_requests(session: Session = Depends(get_session)):
    service = PerformanceAppService(session)
    return {"removed": service.cleanup_expired_requests()}

@router.post("/api/performance/leadership-requests/{request_id}/respond")
def respond_to_leadership_request(
    request_id: uuid.UUID,
    req: LeadershipResponse,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    service = PerformanceAppService(session)
    result = service.respond_to_leadership_request(request_id, req.response, user)
    _schedule_publish(background_tasks, service)
    return result

@router.post("/api/performance/sessions/{session_id}/takeover")
def force_takeover(
    session_id: uuid.UUID,
    background_tasks: BackgroundTasks,
    admin: User = Depends(require_level(ADMIN)),
    session: Session = Depends(get_session),
):
    service = PerformanceAppService(session)
    result = service.force_takeover(session_id, admin)
    _schedule_publish(background_tasks, service)
    return result

@router.websocket("/ws/performance/{session_id}")
async def performance_websocket(
    websocket: WebSocket,
    session_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    セッションの変更をリアルタイムで受け取るためのWebSocket。
    接続直後に現在のセッション行を送り、以降は {"table", "event", "new"} を配信する。
    """
    service = PerformanceAppService(session)
    current = service.enrich(service.repository.get_session(session_id))
    # 接続中ずっとDB接続を握らないよう、スナップショット取得後にプールへ返す
    session.close()

    channel = channel_name(session_id)
    await hub.connect(channel, websocket, initial={"table": "performance_sessions", "event": "SNAPSHOT", "new": current})
    try:
        while True:
            # クライアントからのメッセージは使わない (切断検知のみ)
            await websocket.receive_text()
    except WebSocketDisconnect:
        hub.disconnect(channel, websocket)
