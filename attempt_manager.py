"""
Attempt lifecycle: validate a submission, score it, persist it once,
and serve it back only to its owner.

Attempts are write-once. Nothing here updates or deletes one.
"""

from __future__ import annotations

import logging
import re
from datetime import UTC, datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import scoring
from db import SessionLocal
from errors import ForbiddenError, InternalError, NotFoundError, ValidationError
from models import Attempt, Drill
from schemas.attempts import (
    AnswerOut,
    AttemptCreate,
    AttemptDetail,
    AttemptListItem,
    AttemptListResponse,
    AttemptOut,
    DrillStats,
    OverallStats,
    StatsResponse,
)
from schemas.drills import DrillOut

logger = logging.getLogger("updrill.attempts")

DEFAULT_LIST_LIMIT = 5
MAX_LIST_LIMIT = 50
TOP_DRILLS = 5

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_limit(raw: Any) -> int:
    """
    Leading integer of `raw` ("7abc" -> 7, "1.5" -> 1), clamped to [1, 50].
    Missing or non-numeric input -> 5.
    """
    m = _LEADING_INT.match(str(raw)) if raw is not None else None
    if m is None:
        return DEFAULT_LIST_LIMIT
    n = int(m.group(1))
    return max(1, min(n, MAX_LIST_LIMIT))


def validate_submission(payload: AttemptCreate) -> Tuple[str, List[AnswerOut]]:
    """
    Return (drill_id, answers) with trimmed text, or raise ValidationError
    listing every problem found.
    """
    details: List[Dict[str, str]] = []

    drill_id = (payload.drill_id or "").strip()
    if not drill_id:
        details.append({"field": "drillId", "message": "Drill ID is required"})

    answers: List[AnswerOut] = []
    if not payload.answers:
        details.append({"field": "answers", "message": "At least one answer is required"})
    else:
        seen = set()
        for i, a in enumerate(payload.answers):
            qid = (a.qid or "").strip()
            text = (a.text or "").strip()
            if not qid:
                details.append({"field": f"answers.{i}.qid", "message": "Question ID is required"})
            elif qid in seen:
                details.append(
                    {"field": f"answers.{i}.qid", "message": f"Duplicate question ID '{qid}'"}
                )
            seen.add(qid)
            if not text:
                details.append(
                    {"field": f"answers.{i}.text", "message": "Answer text is required"}
                )
            answers.append(AnswerOut(qid=qid, text=text))

    if details:
        raise ValidationError(details)
    return drill_id, answers


class AttemptManager:
    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ):
        self.session_factory = session_factory
        self.clock = clock

    # --- write ---------------------------------------------------------------

    def submit(self, user_id: str, payload: AttemptCreate) -> AttemptOut:
        drill_id, answers = validate_submission(payload)

        with self.session_factory() as db:
            try:
                drill = db.get(Drill, drill_id)
                if drill is None:
                    raise NotFoundError("Drill not found")
                drill_doc = DrillOut.model_validate(drill)
                score = scoring.score(drill_doc, answers)

                # The drill may be removed between lookup and insert. Check again
                # right before writing; a removal after this point leaves an
                # orphaned attempt, which reads tolerate.
                still_there = db.scalar(select(Drill.id).where(Drill.id == drill_id))
                if still_there is None:
                    raise NotFoundError("Drill not found")

                attempt = Attempt(
                    user_id=user_id,
                    drill_id=drill_id,
                    answers=[a.model_dump() for a in answers],
                    score=score,
                    created_at=self.clock(),
                )
                db.add(attempt)
                db.commit()
                db.refresh(attempt)
            except SQLAlchemyError as e:
                db.rollback()
                logger.exception(
                    "attempt insert failed user=%s drill=%s", user_id, drill_id
                )
                raise InternalError() from e

            logger.info(
                "attempt %s created user=%s drill=%s score=%d",
                attempt.id,
                user_id,
                drill_id,
                score,
            )
            return AttemptOut(
                id=attempt.id,
                drill_id=drill_id,
                drill_title=drill_doc.title,
                drill_difficulty=drill_doc.difficulty,
                answers=answers,
                score=attempt.score,
                created_at=attempt.created_at,
            )

    # --- read ----------------------------------------------------------------

    def get_by_id(self, requester_id: str, attempt_id: str) -> AttemptDetail:
        with self.session_factory() as db:
            try:
                attempt = db.get(Attempt, attempt_id)
                if attempt is None:
                    raise NotFoundError("Attempt not found")
                # existence first, then ownership: non-owners get 403, not 404
                if attempt.user_id != requester_id:
                    raise ForbiddenError()
                drill = db.get(Drill, attempt.drill_id)
            except SQLAlchemyError as e:
                logger.exception("attempt read failed id=%s", attempt_id)
                raise InternalError() from e

            return AttemptDetail(
                id=attempt.id,
                drill_id=attempt.drill_id,
                drill_title=drill.title if drill else None,
                drill_difficulty=drill.difficulty if drill else None,
                drill_tags=list(drill.tags or []) if drill else [],
                answers=[AnswerOut(**a) for a in attempt.answers],
                score=attempt.score,
                created_at=attempt.created_at,
            )

    def list_by_user(self, user_id: str, limit: Any = None) -> AttemptListResponse:
        n = parse_limit(limit)
        with self.session_factory() as db:
            try:
                attempts = db.scalars(
                    select(Attempt)
                    .where(Attempt.user_id == user_id)
                    .order_by(Attempt.created_at.desc(), Attempt.id.desc())
                    .limit(n)
                ).all()
                drills = self._drills_by_id(db, {a.drill_id for a in attempts})
            except SQLAlchemyError as e:
                logger.exception("attempt listing failed user=%s", user_id)
                raise InternalError() from e

            items = []
            for a in attempts:
                d = drills.get(a.drill_id)
                items.append(
                    AttemptListItem(
                        id=a.id,
                        drill_id=a.drill_id,
                        drill_title=d.title if d else None,
                        drill_difficulty=d.difficulty if d else None,
                        drill_tags=list(d.tags or []) if d else [],
                        score=a.score,
                        created_at=a.created_at,
                    )
                )
        return AttemptListResponse(attempts=items, count=len(items))

    def stats_by_user(self, user_id: str) -> StatsResponse:
        with self.session_factory() as db:
            try:
                count, avg, best, worst = db.execute(
                    select(
                        func.count(Attempt.id),
                        func.avg(Attempt.score),
                        func.max(Attempt.score),
                        func.min(Attempt.score),
                    ).where(Attempt.user_id == user_id)
                ).one()

                best_score = func.max(Attempt.score).label("best_score")
                per_drill = db.execute(
                    select(
                        Attempt.drill_id,
                        func.count(Attempt.id),
                        best_score,
                        func.avg(Attempt.score),
                    )
                    .where(Attempt.user_id == user_id)
                    .group_by(Attempt.drill_id)
                    .order_by(best_score.desc(), Attempt.drill_id)
                    .limit(TOP_DRILLS)
                ).all()
                drills = self._drills_by_id(db, {row[0] for row in per_drill})
            except SQLAlchemyError as e:
                logger.exception("attempt stats failed user=%s", user_id)
                raise InternalError() from e

        overall = OverallStats()
        if count:
            overall = OverallStats(
                total_attempts=count,
                average_score=_round2(avg),
                highest_score=best,
                lowest_score=worst,
            )

        top = []
        for drill_id, n, best_for_drill, avg_for_drill in per_drill:
            d = drills.get(drill_id)
            top.append(
                DrillStats(
                    drill_id=drill_id,
                    drill_title=d.title if d else None,
                    attempts=n,
                    best_score=best_for_drill,
                    average_score=_round2(avg_for_drill),
                )
            )
        return StatsResponse(overall=overall, top_drills=top)

    @staticmethod
    def _drills_by_id(db: Session, ids: set) -> Dict[str, Drill]:
        if not ids:
            return {}
        return {d.id: d for d in db.scalars(select(Drill).where(Drill.id.in_(ids))).all()}


def _round2(value: Optional[Any]) -> float:
    return round(float(value), 2) if value is not None else 0.0


manager = AttemptManager()


def get_attempt_manager() -> AttemptManager:
    return manager
