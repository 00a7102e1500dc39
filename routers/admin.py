from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from bank import reload_bank
from deps.auth import require_admin
from deps.session import registry
from errors import LoadError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.post("/reload")
async def reload_questions():
    try:
        n = await reload_bank()
    except LoadError as e:
        # the previous bank stays in place
        logger.error("bank reload failed: %s", e)
        return {"ok": False, "error": e.reason}

    registry.clear()
    logger.info("bank reloaded: %d questions", n)
    return {"ok": True, "count": n}
