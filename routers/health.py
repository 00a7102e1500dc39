# quizbank/routers/health.py
from fastapi import APIRouter, HTTPException
from sqlalchemy import inspect, text

from alembic.config import Config
from alembic.script import ScriptDirectory
from bank import QuestionBank
from db import engine
from models import KVEntry

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/db")
def health_db():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            has_table = inspect(conn).has_table(KVEntry.__tablename__)
        return {"ok": has_table, "kv_table": has_table}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"db_error: {type(e).__name__}: {e}")


@router.get("/bank")
def health_bank():
    # reports on the cached bank only; does not trigger a load
    bank = QuestionBank.peek()
    if bank is None:
        return {"ok": False, "loaded": False, "questions": 0, "subjects": 0}
    return {"ok": True, "loaded": True, "questions": len(bank), "subjects": len(bank.index)}


def _alembic_heads() -> list[str]:
    cfg = Config("alembic.ini")
    script = ScriptDirectory.from_config(cfg)
    return list(script.get_heads())


@router.get("/migrations")
def health_migrations():
    heads: list[str] = []
    db_ver = None
    try:
        heads = _alembic_heads()
    except Exception:
        heads = []

    try:
        with engine.connect() as conn:
            try:
                db_ver = conn.execute(
                    text("SELECT version_num FROM alembic_version")
                ).scalar_one_or_none()
            except Exception:
                db_ver = None
    except Exception as e:
        return {
            "ok": False,
            "error": f"db_connect_failed: {e}",
            "code_heads": heads,
            "db_version": db_ver,
        }

    synced = (db_ver in heads) if heads else False
    return {"ok": synced, "synced": synced, "db_version": db_ver, "code_heads": heads}
