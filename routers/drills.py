from __future__ import annotations

import hashlib
import json
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import JSONResponse

from catalog import DEFAULT_LIMIT, DrillCatalog, get_catalog
from db import SessionLocal
from schemas.drills import Difficulty, DrillListResponse, DrillOut

router = APIRouter(prefix="/api/drills", tags=["drills"])

Catalog = Annotated[DrillCatalog, Depends(get_catalog)]


def _etag(payload: dict) -> str:
    raw = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return f'W/"{hashlib.sha1(raw).hexdigest()}"'


def _etag_matches(header: Optional[str], etag: str) -> bool:
    if not header:
        return False
    candidates = {c.strip() for c in header.split(",")}
    return "*" in candidates or etag in candidates or etag.removeprefix("W/") in candidates


@router.get("", response_model=DrillListResponse)
def list_drills(
    request: Request,
    catalog: Catalog,
    difficulty: Optional[Difficulty] = None,
    tags: Optional[str] = Query(default=None, description="Comma-separated; matches any"),
    search: Optional[str] = Query(default=None, description="Case-insensitive title/tag match"),
    limit: int = DEFAULT_LIMIT,
    page: int = 1,
):
    with SessionLocal() as db:
        listing = catalog.listing(
            db, difficulty=difficulty, tags=tags, search=search, limit=limit, page=page
        )

    payload = listing.model_dump(mode="json")
    etag = _etag(payload)
    headers = {"ETag": etag}
    if not (difficulty or tags or search) and limit == DEFAULT_LIMIT and page == 1:
        headers["Cache-Control"] = f"public, max-age={int(catalog.ttl_seconds)}"

    if _etag_matches(request.headers.get("if-none-match"), etag):
        return Response(status_code=304, headers=headers)
    return JSONResponse(content=payload, headers=headers)


@router.get("/{drill_id}", response_model=DrillOut)
def get_drill(drill_id: str, catalog: Catalog):
    with SessionLocal() as db:
        return catalog.get(db, drill_id)
