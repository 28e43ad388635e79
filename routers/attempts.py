# routers/attempts.py

from typing import Annotated, Optional

from fastapi import APIRouter, Depends

from attempt_manager import AttemptManager, get_attempt_manager
from deps.auth import require_user
from schemas.attempts import (
    AttemptCreate,
    AttemptDetail,
    AttemptListResponse,
    AttemptOut,
    StatsResponse,
)
from schemas.users import UserOut

router = APIRouter(prefix="/api/attempts", tags=["attempts"])

CurrentUser = Annotated[UserOut, Depends(require_user)]
Manager = Annotated[AttemptManager, Depends(get_attempt_manager)]


@router.post("", status_code=201, response_model=AttemptOut)
def submit_attempt(body: AttemptCreate, user: CurrentUser, attempts: Manager):
    return attempts.submit(user.id, body)


@router.get("", response_model=AttemptListResponse)
def list_attempts(user: CurrentUser, attempts: Manager, limit: Optional[str] = None):
    # limit stays a string: junk falls back to the default instead of a 400
    return attempts.list_by_user(user.id, limit)


@router.get("/stats", response_model=StatsResponse)
def attempt_stats(user: CurrentUser, attempts: Manager):
    return attempts.stats_by_user(user.id)


@router.get("/{attempt_id}", response_model=AttemptDetail)
def get_attempt(attempt_id: str, user: CurrentUser, attempts: Manager):
    return attempts.get_by_id(user.id, attempt_id)
