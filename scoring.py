"""
Keyword-match scoring.

Each question is worth POINTS_PER_QUESTION. An answer earns points in
proportion to the question's keywords found (case-insensitive substring)
in its text. The drill score is the earned share of the maximum, 0..100.
Pure functions: no I/O, inputs are never mutated.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Optional, Sequence

POINTS_PER_QUESTION = 10


def _round_half_up(x: float) -> int:
    # round() would give banker's rounding (2.5 -> 2)
    return int(math.floor(x + 0.5))


def matched_keywords(keywords: Sequence[str], text: str) -> List[str]:
    haystack = text.lower()
    return [k for k in keywords if k.lower() in haystack]


def question_points(keywords: Sequence[str], text: str) -> int:
    """Points for one answer against one question's keyword list."""
    if not keywords:
        return 0
    matched = len(matched_keywords(keywords, text))
    return min(_round_half_up(matched / len(keywords) * POINTS_PER_QUESTION), POINTS_PER_QUESTION)


def _latest_answers(answers: Iterable[Any]) -> Dict[str, str]:
    # later answers for the same qid replace earlier ones
    latest: Dict[str, str] = {}
    for a in answers:
        latest[a.qid] = a.text
    return latest


def score_breakdown(drill: Any, answers: Sequence[Any]) -> List[Dict[str, Any]]:
    """
    Per-question result for every question of the drill, in drill order:
    {"qid", "points", "matched"}. Unanswered questions score 0.
    """
    latest = _latest_answers(answers)
    rows: List[Dict[str, Any]] = []
    for q in drill.questions:
        text: Optional[str] = latest.get(q.id)
        if text is None:
            rows.append({"qid": q.id, "points": 0, "matched": []})
            continue
        rows.append(
            {
                "qid": q.id,
                "points": question_points(q.keywords, text),
                "matched": matched_keywords(q.keywords, text),
            }
        )
    return rows


def score(drill: Any, answers: Sequence[Any]) -> int:
    """
    Deterministic score in [0, 100] for `answers` against `drill`.

    Answers whose qid is not in the drill are ignored. A drill with no
    questions scores 0.
    """
    max_score = len(drill.questions) * POINTS_PER_QUESTION
    if max_score == 0:
        return 0

    total = sum(row["points"] for row in score_breakdown(drill, answers))
    return max(0, min(100, _round_half_up(total / max_score * 100)))
