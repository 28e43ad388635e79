# schemas/drills.py
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Difficulty = Literal["easy", "medium", "hard"]


class QuestionOut(BaseModel):
    id: str
    prompt: str
    keywords: List[str] = Field(default_factory=list)


class DrillOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    title: str
    difficulty: Difficulty = "medium"
    tags: List[str] = Field(default_factory=list)
    questions: List[QuestionOut] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class DrillListResponse(BaseModel):
    drills: List[DrillOut]
    pagination: Pagination
