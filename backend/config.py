import os
from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field
import platformdirs

APP_NAME = "SetlistManager"
APP_AUTHOR = "SetlistManagerDev"

class Settings(BaseSettings):
    # App Info
    APP_NAME: str = APP_NAME
    APP_AUTHOR: str = APP_AUTHOR
    ENV: str = "prod"

    # Paths
    # DATABASE_URL (e.g. the Supabase Postgres pooler DSN) wins; otherwise a local SQLite file is used
    USER_DATA_DIR: str = Field(default_factory=lambda: platformdirs.user_data_dir(APP_NAME, APP_AUTHOR))
    DATABASE_URL: str | None = None
    TOS_PATH: str = Field(default_factory=lambda: os.path.join(os.path.dirname(os.path.abspath(__file__)), "static", "tos.md"))

    # Hosted backend (kept for parity with the frontend environment)
    SUPABASE_URL: str | None = None
    SUPABASE_ANON_KEY: str | None = None

    # Network
    PORT: int = 3001
    FRONTEND_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # Performance mode
    LEADERSHIP_REQUEST_TIMEOUT_SECONDS: int = 30

    # Query retries
    QUERY_MAX_RETRIES: int = 3
    QUERY_RETRY_DELAY_SECONDS: float = 1.0

    # Logging
    LOG_DIR: str | None = None
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

    def model_post_init(self, __context):
        if not self.DATABASE_URL:
            self.DATABASE_URL = "sqlite:///" + os.path.join(self.USER_DATA_DIR, "setlists.db")

        if not self.LOG_DIR:
            self.LOG_DIR = os.path.join(self.USER_DATA_DIR, "logs")

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    def setup_environment(self):
        """ロガーなど、設定オブジェクトを経由しない箇所が参照する環境変数を設定する"""
        os.makedirs(self.USER_DATA_DIR, exist_ok=True)
        if self.LOG_DIR:
            os.environ["SETLIST_LOG_DIR"] = self.LOG_DIR

settings = Settings()
