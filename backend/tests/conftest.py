import os
import sys
import tempfile
import pytest
from typing import Callable, Dict, Generator
from sqlmodel import Session, SQLModel, create_engine
from sqlalchemy.pool import StaticPool

# 1. パス解決: backendディレクトリをsys.pathに追加
CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
BACKEND_DIR = os.path.dirname(CURRENT_DIR)
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

# アプリのモジュールをインポートする前に、実DBやログの出力先をテスト用に向ける
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SETLIST_LOG_DIR", os.path.join(tempfile.gettempdir(), "setlist_manager_test_logs"))

import models  # noqa: E402,F401  テーブル定義をメタデータに登録
from domain.models.user import User, MEMBER, EDITOR, ADMIN  # noqa: E402

@pytest.fixture(name="session", scope="function")
def session_fixture(mocker) -> Generator[Session, None, None]:
    """
    テストごとに独立したインメモリSQLiteを用意する。
    StaticPool で単一コネクションを共有し、TestClient のスレッドからも同じDBが見えるようにする。
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)

    # アプリ起動時の init_db (Alembic) がテスト中に走らないようモック化
    mocker.patch("infra.database.connection.init_db")

    with Session(engine) as session:
        yield session

    engine.dispose()

@pytest.fixture(name="client")
def client_fixture(session: Session) -> Generator:
    """FastAPIのTestClientを提供し、DBセッションをDIで差し替える"""
    from fastapi.testclient import TestClient
    from main import app
    from infra.database.connection import get_session

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()

def _make_user(session: Session, name: str, level: int) -> User:
    user = User(name=name, email=f"{name.lower()}@example.com", role="guitar", user_level=level)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user

@pytest.fixture
def member(session: Session) -> User:
    return _make_user(session, "Member", MEMBER)

@pytest.fixture
def editor(session: Session) -> User:
    return _make_user(session, "Editor", EDITOR)

@pytest.fixture
def admin(session: Session) -> User:
    return _make_user(session, "Admin", ADMIN)

@pytest.fixture
def auth() -> Callable[[User], Dict[str, str]]:
    """ユーザーを X-User-Id ヘッダーに変換するヘルパー"""
    def _headers(user: User) -> Dict[str, str]:
        return {"X-User-Id": str(user.id)}
    return _headers
