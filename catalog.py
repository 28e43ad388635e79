from __future__ import annotations

import logging
import math
import os
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from cache import ListingCache
from errors import NotFoundError
from models import Drill
from schemas.drills import DrillListResponse, DrillOut, Pagination

logger = logging.getLogger("updrill.catalog")

DRILLS_CACHE_TTL_MS = int(os.getenv("DRILLS_CACHE_TTL_MS", "60000"))

DEFAULT_LIMIT = 50
MAX_LIMIT = 100
DEFAULT_PAGE = 1
_DEFAULT_KEY = "drills:default"


def split_tags(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [t.strip() for t in raw.split(",") if t.strip()]


def _matches(drill: Drill, tags: List[str], search: Optional[str]) -> bool:
    drill_tags = drill.tags or []
    if tags and not any(t in drill_tags for t in tags):
        return False
    if search:
        needle = search.lower()
        if needle not in drill.title.lower() and not any(
            needle in t.lower() for t in drill_tags
        ):
            return False
    return True


class DrillCatalog:
    """Read side of the drill collection, with the default listing cached."""

    def __init__(self, cache: ListingCache, ttl_seconds: float):
        self.cache = cache
        self.ttl_seconds = ttl_seconds

    def get(self, db: Session, drill_id: str) -> DrillOut:
        drill = db.get(Drill, drill_id)
        if drill is None:
            raise NotFoundError("Drill not found")
        return DrillOut.model_validate(drill)

    def listing(
        self,
        db: Session,
        difficulty: Optional[str] = None,
        tags: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = DEFAULT_LIMIT,
        page: int = DEFAULT_PAGE,
    ) -> DrillListResponse:
        limit = max(1, min(limit, MAX_LIMIT))
        page = max(1, page)
        tag_list = split_tags(tags)

        is_default = (
            not difficulty
            and not tag_list
            and not search
            and limit == DEFAULT_LIMIT
            and page == DEFAULT_PAGE
        )
        if is_default:
            cached = self.cache.get(_DEFAULT_KEY)
            if cached is not None:
                return cached

        stmt = select(Drill).order_by(Drill.created_at.desc(), Drill.id)
        if difficulty:
            stmt = stmt.where(Drill.difficulty == difficulty)
        # tags/search run over JSON columns; filter in Python to stay DB-agnostic
        rows = [d for d in db.scalars(stmt).all() if _matches(d, tag_list, search)]

        total = len(rows)
        start = (page - 1) * limit
        response = DrillListResponse(
            drills=[DrillOut.model_validate(d) for d in rows[start : start + limit]],
            pagination=Pagination(
                page=page, limit=limit, total=total, pages=math.ceil(total / limit)
            ),
        )

        if is_default:
            self.cache.set(_DEFAULT_KEY, response, self.ttl_seconds)
            logger.debug("drill listing cached (%d drills)", total)
        return response

    def invalidate(self) -> None:
        self.cache.clear()


catalog = DrillCatalog(ListingCache(), ttl_seconds=DRILLS_CACHE_TTL_MS / 1000)


def get_catalog() -> DrillCatalog:
    return catalog
