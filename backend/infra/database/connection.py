import os
import threading
from sqlmodel import create_engine, Session
from config import settings
from infra.database.schema import init_schema, is_new_database
from utils.logger import get_logger

logger = get_logger(__name__)

DATABASE_URL = settings.DATABASE_URL

connect_args = {}
if settings.is_sqlite:
    # ローカル開発用 SQLite (本番は Supabase の Postgres を DATABASE_URL で指定)
    connect_args = {"check_same_thread": False}
    db_file = DATABASE_URL.replace("sqlite:///", "", 1)
    if db_file and db_file != ":memory:":
        os.makedirs(os.path.dirname(os.path.abspath(db_file)), exist_ok=True)

engine = create_engine(
    DATABASE_URL,
    pool_pre_ping=True,
    connect_args=connect_args
)

db_lock = threading.RLock()

def init_db():
    """
    アプリケーション起動時のDB初期化フロー。
    新規DBならテーブルを作成して Alembic の head をスタンプし、
    既存DBなら Alembic で差分を適用する。
    """
    from alembic.config import Config
    from alembic import command

    is_new_db = is_new_database(engine)

    with db_lock:
        try:
            base_dir = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
            alembic_cfg = Config(os.path.join(base_dir, "alembic.ini"))
            alembic_cfg.set_main_option("script_location", os.path.join(base_dir, "alembic"))

            if is_new_db:
                init_schema(engine)

            with engine.begin() as connection:
                alembic_cfg.attributes["connection"] = connection
                if is_new_db:
                    logger.info("New database detected. Stamping version...")
                    command.stamp(alembic_cfg, "head")
                else:
                    logger.info("Existing database detected. Running migrations...")
                    command.upgrade(alembic_cfg, "head")
        except Exception as e:
            logger.error(f"Error during database initialization: {e}")
            raise

def close_db():
    """
    データベース接続を終了する。
    main.py の lifespan イベントから呼び出されます。
    """
    engine.dispose()

def get_session():
    with Session(engine) as session:
        yield session
