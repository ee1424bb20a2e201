from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlalchemy.exc import IntegrityError

from infra.database import connection as db_connection
from domain.exceptions import SetlistManagerError
from api.routers import (
    performance,
    set_templates,
    setlists,
    sets,
    song_collections,
    songs,
    system,
    users,
)
from config import settings
from utils.errors import format_error
from utils.logger import get_logger

logger = get_logger(__name__)

# Lifespan event to handle startup/shutdown
@asynccontextmanager
async def lifespan(app: FastAPI):
    db_connection.init_db()  # テーブル作成 + Alembicのリビジョン管理
    yield
    db_connection.close_db()

app = FastAPI(title="Setlist Manager API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(SetlistManagerError)
async def setlist_manager_error_handler(request: Request, exc: SetlistManagerError):
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))

@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
    return JSONResponse(status_code=400, content={"detail": format_error(exc)})

# Root endpoint for health check
@app.get("/")
async def root():
    return {"message": "Setlist Manager API is running"}

# Include Routers
app.include_router(performance.router)
app.include_router(set_templates.router)
app.include_router(setlists.router)
app.include_router(sets.router)
app.include_router(song_collections.router)
app.include_router(songs.router)
app.include_router(system.router)
app.include_router(users.router)
