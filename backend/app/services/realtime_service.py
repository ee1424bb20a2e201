import inspect
import uuid
from typing import List, Dict, Any, Callable, Union
from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder

from utils.logger import get_logger

logger = get_logger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"

Handler = Callable[[Dict[str, Any]], Any]

def channel_name(session_id: Union[uuid.UUID, str]) -> str:
    return f"performance_session_{session_id}"

def make_event(table: str, event: str, row: Any) -> Dict[str, Any]:
    """{"table", "event", "new"} 形式のイベントエンベロープを作る"""
    return {"table": table, "event": event, "new": jsonable_encoder(row)}

class SessionChannelHub:
    """
    パフォーマンスセッションごとのチャンネルにWebSocket接続とハンドラーを保持し、
    セッション/参加者/リーダー交代リクエストの変更をブロードキャストする。
    配信順序や再送は保証しない (切断されたら再接続して行を読み直す)。
    """
    def __init__(self):
        self.active_connections: Dict[str, List[WebSocket]] = {}
        self.handlers: Dict[str, List[Handler]] = {}

    async def connect(self, channel: str, websocket: WebSocket, initial: Any = None):
        await websocket.accept()
        self.active_connections.setdefault(channel, []).append(websocket)
        logger.info(f"WebSocket connected to {channel} ({len(self.active_connections[channel])} clients)")
        if initial is not None:
            await websocket.send_json(jsonable_encoder(initial))

    def disconnect(self, channel: str, websocket: WebSocket):
        connections = self.active_connections.get(channel, [])
        if websocket in connections:
            connections.remove(websocket)
        if not connections:
            self.active_connections.pop(channel, None)

    def subscribe(self, channel: str, handler: Handler):
        self.handlers.setdefault(channel, []).append(handler)

    def unsubscribe(self, channel: str, handler: Handler):
        handlers = self.handlers.get(channel, [])
        if handler in handlers:
            handlers.remove(handler)
        if not handlers:
            self.handlers.pop(channel, None)

    async def broadcast(self, channel: str, message: Dict[str, Any]):
        # 送信に失敗した接続は取り除く
        active = []
        for connection in self.active_connections.get(channel, []):
            try:
                await connection.send_json(message)
                active.append(connection)
            except Exception as e:
                logger.warning(f"Dropping websocket on {channel}: {e}")
        if active:
            self.active_connections[channel] = active
        else:
            self.active_connections.pop(channel, None)

        for handler in list(self.handlers.get(channel, [])):
            try:
                result = handler(message)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.warning(f"Handler on {channel} failed: {e}")

    async def publish(self, session_id: Union[uuid.UUID, str], events: List[Dict[str, Any]]):
        channel = channel_name(session_id)
        for event in events:
            await self.broadcast(channel, event)

    def connection_count(self, channel: str) -> int:
        return len(self.active_connections.get(channel, []))

hub = SessionChannelHub()
