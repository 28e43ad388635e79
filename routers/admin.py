from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from bank import SeedError, seed_drills
from catalog import catalog
from db import SessionLocal
from deps.auth import require_admin
from errors import InternalError

logger = logging.getLogger("updrill.catalog")

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.post("/reload")
def reload_drills():
    with SessionLocal() as db:
        try:
            n = seed_drills(db)
        except SeedError as e:
            logger.error("drill reload aborted, catalog unchanged: %s", e)
            raise InternalError() from e
    catalog.invalidate()
    return {"ok": True, "count": n}
