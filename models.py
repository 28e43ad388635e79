from __future__ import annotations

import uuid
from datetime import UTC, datetime

import sqlalchemy as sa
from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db import Base


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.now(UTC)


class Drill(Base):
    __tablename__ = "drills"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(200))
    difficulty: Mapped[str] = mapped_column(String(16), default="medium", index=True)
    tags: Mapped[list] = mapped_column(JSON, default=list)
    # ordered [{id, prompt, keywords}], embedded like a document
    questions: Mapped[list] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    __table_args__ = (
        sa.CheckConstraint(
            "difficulty IN ('easy', 'medium', 'hard')", name="difficulty_allowed"
        ),
    )


class User(Base):
    __tablename__ = "users"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    email: Mapped[str] = mapped_column(String(320), unique=True)
    name: Mapped[str] = mapped_column(String(200))
    picture: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    providers: Mapped[list] = mapped_column(JSON, default=list)  # [{provider, provider_id}]
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)


class Attempt(Base):
    __tablename__ = "attempts"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(32), ForeignKey("users.id"))
    # no FK: a drill removed after submission leaves the attempt readable
    drill_id: Mapped[str] = mapped_column(String(32), index=True)
    answers: Mapped[list] = mapped_column(JSON)  # [{qid, text}] in submission order
    score: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    __table_args__ = (
        sa.CheckConstraint("score >= 0 AND score <= 100", name="score_range"),
        sa.Index("ix_attempts_user_id_created_at", "user_id", "created_at"),
    )
