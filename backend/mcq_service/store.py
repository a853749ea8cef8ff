from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .generation import GeneratedItem
from .item_bank import Feedback, Option
from .matching import normalize_objective
from .models import GeneratedItem as GeneratedItemRow
from .models import Mastery, Response

logger = logging.getLogger(__name__)

SERVABLE_QUALITY = ("unreviewed", "validated")


def mastery_ratio(correct: int, total: int) -> float:
    return correct / total if total > 0 else 0.0


def mastery_payload(row: Mastery) -> Dict[str, Any]:
    ratio = mastery_ratio(row.correct, row.total)
    return {
        "objective": row.objective,
        "correct": row.correct,
        "total": row.total,
        "current_score": f"{row.correct}/{row.total}",
        "mastery": ratio,
        "mastery_estimate": f"{round(ratio * 100)}%",
    }


def log_response(
    db: Session,
    *,
    user_id: str,
    objective: str,
    selected_answer: str,
    correct_answer: str,
    is_correct: bool,
    item_id: Optional[str] = None,
    session_id: Optional[str] = None,
    latency_ms: Optional[int] = None,
    difficulty: Optional[str] = None,
) -> bool:
    """Insert one response row; False (and a logged error) if the write fails."""
    row = Response(
        user_id=user_id,
        objective=objective,
        item_id=item_id,
        session_id=session_id,
        selected_answer=selected_answer,
        correct_answer=correct_answer,
        is_correct=is_correct,
        latency_ms=latency_ms,
        difficulty=difficulty,
    )
    try:
        db.add(row)
        db.commit()
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Error logging response for %s/%r: %s", user_id, objective, e)
        return False


def upsert_mastery(db: Session, user_id: str, objective: str, was_correct: bool) -> Mastery:
    row = db.get(Mastery, (user_id, objective))
    if row is None:
        row = Mastery(user_id=user_id, objective=objective, correct=0, total=0)
    row.correct = (row.correct or 0) + (1 if was_correct else 0)
    row.total = (row.total or 0) + 1
    row.updated_at = datetime.utcnow()
    db.merge(row)
    db.commit()
    return db.get(Mastery, (user_id, objective))


def get_mastery(db: Session, user_id: str, objective: str) -> Optional[Mastery]:
    return db.get(Mastery, (user_id, objective))


def list_mastery(db: Session, user_id: str) -> List[Mastery]:
    stmt = select(Mastery).where(Mastery.user_id == user_id).order_by(Mastery.objective)
    return list(db.execute(stmt).scalars())


def record_answer(
    db: Session,
    *,
    user_id: str,
    objective: str,
    selected_answer: str,
    correct_answer: str,
    item_id: Optional[str] = None,
    session_id: Optional[str] = None,
    latency_ms: Optional[int] = None,
    difficulty: Optional[str] = None,
) -> Tuple[bool, bool, Optional[Mastery]]:
    """Log the response, bump generated-item stats, update mastery.

    Returns (was_correct, response_logged, mastery_row). mastery_row is None
    when the counter upsert failed.
    """
    selected = (selected_answer or "").strip().upper()
    expected = (correct_answer or "").strip().upper()
    was_correct = selected == expected
    logged = log_response(
        db,
        user_id=user_id,
        objective=objective,
        selected_answer=selected,
        correct_answer=expected,
        is_correct=was_correct,
        item_id=item_id,
        session_id=session_id,
        latency_ms=latency_ms,
        difficulty=difficulty,
    )
    if item_id and item_id.startswith(("gen-", "ext-")):
        bump_item_stats(db, item_id, was_correct)
    try:
        mastery = upsert_mastery(db, user_id, objective, was_correct)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Error updating mastery for %s/%r: %s", user_id, objective, e)
        mastery = None
    return was_correct, logged, mastery


def bump_item_stats(db: Session, item_id: str, was_correct: bool) -> None:
    try:
        row = db.get(GeneratedItemRow, item_id)
        if row is None:
            return
        row.total_attempts = (row.total_attempts or 0) + 1
        if was_correct:
            row.correct_count = (row.correct_count or 0) + 1
        db.add(row)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("Could not update stats for item %s: %s", item_id, e)


def _to_generated_item(row: GeneratedItemRow) -> GeneratedItem:
    return GeneratedItem(
        id=row.id,
        objective=row.objective,
        objective_normalized=row.objective_normalized,
        topic=row.topic,
        difficulty=row.difficulty,
        stem=row.stem,
        code=row.code,
        options=[Option(**opt) for opt in json.loads(row.options_json)],
        correct=row.correct,
        feedback=Feedback(**json.loads(row.feedback_json)),
        source=row.source,
        model=row.model,
        quality=row.quality,
    )


def find_cached_item(db: Session, objective: str, difficulty: str) -> Optional[GeneratedItem]:
    """Most-used servable item generated for the same objective and difficulty."""
    stmt = (
        select(GeneratedItemRow)
        .where(GeneratedItemRow.objective_normalized == normalize_objective(objective))
        .where(GeneratedItemRow.difficulty == difficulty)
        .where(GeneratedItemRow.quality.in_(SERVABLE_QUALITY))
        .order_by(GeneratedItemRow.use_count.desc(), GeneratedItemRow.created_at)
        .limit(1)
    )
    row = db.execute(stmt).scalars().first()
    if row is None:
        return None
    item = _to_generated_item(row)
    try:
        row.use_count = (row.use_count or 0) + 1
        row.last_used_at = datetime.utcnow()
        db.add(row)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("Could not update usage for cached item %s: %s", item.id, e)
    return item


def store_generated_item(db: Session, item: GeneratedItem, *, use_count: int = 1) -> None:
    row = GeneratedItemRow(
        id=item.id,
        objective=item.objective,
        objective_normalized=item.objective_normalized,
        topic=item.topic,
        difficulty=item.difficulty,
        stem=item.stem,
        code=item.code,
        options_json=json.dumps([opt.model_dump() for opt in item.options], ensure_ascii=False),
        correct=item.correct,
        feedback_json=json.dumps(item.feedback.model_dump(), ensure_ascii=False),
        source=item.source,
        model=item.model,
        quality=item.quality,
        use_count=use_count,
        last_used_at=datetime.utcnow() if use_count else None,
    )
    db.add(row)
    db.commit()
