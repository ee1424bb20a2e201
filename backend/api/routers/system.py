import os
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, text

from config import settings
from infra.database.connection import get_session
from utils.markdown import render_markdown
from utils.errors import format_error
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()

@router.get("/api/health")
def health_check(session: Session = Depends(get_session)):
    """DB接続の確認と、設定状況を返す"""
    status = {
        "status": "ok",
        "database": {
            "dialect": session.get_bind().dialect.name,
            "connected": False,
        },
        "supabase": {
            "url_configured": bool(settings.SUPABASE_URL),
            "anon_key_configured": bool(settings.SUPABASE_ANON_KEY),
        },
    }
    try:
        session.exec(text("SELECT 1"))
        status["database"]["connected"] = True
    except Exception as e:
        logger.error(f"Health check query failed: {e}")
        status["status"] = "degraded"
        status["database"]["error"] = format_error(e)
    return status

@router.get("/api/terms")
def get_terms():
    """利用規約 (tos.md) をHTMLに変換して返す"""
    path = settings.TOS_PATH
    if not os.path.exists(path):
        raise HTTPException(status_code=404, detail="Terms of Service not found")
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()
    return {"html": render_markdown(content)}
