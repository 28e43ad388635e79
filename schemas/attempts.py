from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# ---------- Submit ----------


class AnswerIn(BaseModel):
    # Optional so blank/missing values reach the attempt manager's validation
    qid: Optional[str] = None
    text: Optional[str] = None


class AttemptCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    drill_id: Optional[str] = Field(default=None, alias="drillId")
    answers: Optional[List[AnswerIn]] = None


class AnswerOut(BaseModel):
    qid: str
    text: str


# ---------- Read ----------


class AttemptOut(BaseModel):
    id: str
    drill_id: str
    drill_title: Optional[str] = None
    drill_difficulty: Optional[str] = None
    answers: List[AnswerOut]
    score: int
    created_at: datetime


class AttemptDetail(AttemptOut):
    drill_tags: List[str] = Field(default_factory=list)


class AttemptListItem(BaseModel):
    id: str
    drill_id: str
    drill_title: Optional[str] = None
    drill_difficulty: Optional[str] = None
    drill_tags: List[str] = Field(default_factory=list)
    score: int
    created_at: datetime


class AttemptListResponse(BaseModel):
    attempts: List[AttemptListItem]
    count: int


# ---------- Stats ----------


class OverallStats(BaseModel):
    total_attempts: int = 0
    average_score: float = 0
    highest_score: int = 0
    lowest_score: int = 0


class DrillStats(BaseModel):
    drill_id: str
    drill_title: Optional[str] = None
    attempts: int
    best_score: int
    average_score: float


class StatsResponse(BaseModel):
    overall: OverallStats
    top_drills: List[DrillStats]
