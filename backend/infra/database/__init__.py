# Database module
from .connection import engine, get_session, init_db, close_db, db_lock, DATABASE_URL
from .schema import init_schema
