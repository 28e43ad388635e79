# bank.py

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator
from sqlalchemy import delete
from sqlalchemy.orm import Session

from models import Drill
from schemas.drills import Difficulty, QuestionOut

logger = logging.getLogger("updrill.catalog")

_BASE = Path(__file__).resolve().parent
DRILLS_SEED_FILE = Path(os.getenv("DRILLS_SEED_FILE", str(_BASE / "data" / "drills.json")))


class DrillSeed(BaseModel):
    id: Optional[str] = Field(default=None, max_length=32)
    title: str
    difficulty: Difficulty = "medium"
    tags: List[str] = Field(default_factory=list)
    questions: List[QuestionOut] = Field(default_factory=list)

    @field_validator("questions")
    @classmethod
    def _unique_question_ids(cls, qs: List[QuestionOut]) -> List[QuestionOut]:
        ids = [q.id for q in qs]
        if len(ids) != len(set(ids)):
            raise ValueError("question ids must be unique within a drill")
        return qs


class SeedError(Exception):
    """The seed file is missing, unreadable or holds no valid drills."""


def _iter_json(p: Path) -> Iterable[Dict[str, Any]]:
    with p.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise SeedError(f"drill seed file {p} is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise SeedError(f"drill seed file {p} must hold a JSON list")
    yield from data


def load_seeds(path: Path | None = None) -> List[DrillSeed]:
    path = path or DRILLS_SEED_FILE
    if not path.is_file():
        raise SeedError(f"drill seed file {path} not found")

    seeds: List[DrillSeed] = []
    for idx, raw in enumerate(_iter_json(path)):
        try:
            seeds.append(DrillSeed(**raw))
        except (ValidationError, TypeError) as e:
            # Skip invalid records
            logger.warning("skipping drill #%d in %s: %s", idx, path, e)
    return seeds


def seed_drills(db: Session, path: Path | None = None, replace: bool = True) -> int:
    """
    Load drills from the seed file into the database. Returns the count inserted.

    Raises SeedError before touching the table when nothing valid loads, so a
    broken file never empties the catalog.
    """
    seeds = load_seeds(path)
    if not seeds:
        raise SeedError(f"no valid drills in {path or DRILLS_SEED_FILE}")
    if replace:
        db.execute(delete(Drill))
    for s in seeds:
        data = s.model_dump(exclude_none=True)
        db.add(Drill(**data))
    db.commit()
    logger.info("seeded %d drills from %s", len(seeds), path or DRILLS_SEED_FILE)
    return len(seeds)
