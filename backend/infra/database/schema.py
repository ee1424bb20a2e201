from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel
from utils.logger import get_logger

logger = get_logger(__name__)

# init_db がこのテーブルの有無で新規DBかどうかを判定する
SENTINEL_TABLE = "songs"

def is_new_database(conn_engine: Engine) -> bool:
    return not inspect(conn_engine).has_table(SENTINEL_TABLE)

def init_schema(conn_engine: Engine):
    """
    SQLModel のメタデータから全テーブルを作成する。
    既存テーブルはスキップされる (create_all は IF NOT EXISTS 相当)。
    """
    import models  # noqa: F401  テーブル定義をメタデータに登録

    logger.info(f"Initializing schema on {conn_engine.dialect.name}...")
    try:
        SQLModel.metadata.create_all(conn_engine)
    except Exception as e:
        logger.error(f"Failed to initialize database schema: {e}")
        raise
