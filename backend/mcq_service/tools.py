"""Tool handlers: item serving, topic matching, response logging and mastery.

Each tool takes a validated argument model and returns a JSON-ready dict.
Expected failures (no match with generation disabled, model errors, storage
errors) come back as payloads with an ``error`` key, not exceptions.
"""

from __future__ import annotations

import inspect
import logging
import random
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type, Union

import httpx
from pydantic import BaseModel, Field, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import store
from .generation import GeneratedItem, GenerationError, generate_item, new_item_id
from .item_bank import Difficulty, Feedback, Item, ItemBank, Option
from .matching import (
    MATCH_THRESHOLD,
    MatchResult,
    TopicMatcher,
    alternatives_of,
    normalize_objective,
    should_use_item_bank,
)

logger = logging.getLogger(__name__)


class UnknownToolError(ValueError):
    pass


class ToolArgumentError(ValueError):
    pass


class ToolContext:
    """Per-request collaborators for the tool handlers."""

    def __init__(
        self,
        db: Session,
        bank: ItemBank,
        matcher: TopicMatcher,
        *,
        generator_factory: Optional[Callable[[], Any]] = None,
        generation_enabled: bool = False,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.db = db
        self.bank = bank
        self.matcher = matcher
        self.generator_factory = generator_factory
        self.generation_enabled = generation_enabled and generator_factory is not None
        self.rng = rng or random.Random()

    def match(self, objective: str) -> MatchResult:
        return self.matcher.match(objective, self.bank.topics())


# ---- argument models ----------------------------------------------------


class ListTopicsArgs(BaseModel):
    pass


class MatchTopicArgs(BaseModel):
    objective: str


class GenerateArgs(BaseModel):
    user_id: str
    objective: str
    difficulty: Difficulty = "medium"


class AddItemArgs(BaseModel):
    objective: str
    topic: Optional[str] = None
    difficulty: Difficulty
    stem: str
    code: Optional[str] = None
    options: List[Option] = Field(min_length=2)
    correct: str = Field(pattern=r"^[A-Da-d]$")
    feedback: Feedback = Field(default_factory=Feedback)
    source: Optional[str] = None


class RecordArgs(BaseModel):
    user_id: str
    objective: str
    selected_answer: str
    correct_answer: str
    item_id: Optional[str] = None
    session_id: Optional[str] = None
    latency_ms: Optional[int] = Field(default=None, ge=0)
    difficulty: Optional[Difficulty] = None


class StatusArgs(BaseModel):
    user_id: str
    objective: Optional[str] = None


# ---- helpers ------------------------------------------------------------


def match_payload(objective: str, match: MatchResult, bank: ItemBank) -> Dict[str, Any]:
    item_count = len(bank.items_for(match.topic))
    has_items = item_count > 0
    alternatives = alternatives_of(match)
    return {
        "objective": objective,
        "matched_topic": match.topic,
        "confidence": match.confidence,
        "match_type": match.match_type,
        "has_items": has_items,
        "item_count": item_count,
        "will_use_item_bank": should_use_item_bank(match) and has_items,
        "alternatives": [alt.model_dump() for alt in alternatives] if alternatives is not None else None,
        "threshold": MATCH_THRESHOLD,
    }


def _item_payload(user_id: str, item: Union[Item, GeneratedItem], topic: str) -> Dict[str, Any]:
    return {
        "user_id": user_id,
        "item_id": item.id,
        "topic": topic,
        "difficulty": item.difficulty,
        "question": item.stem,
        "code": item.code or None,
        "options": item.options_map(),
        "correct_answer": item.correct,
        "explanation": item.feedback.explanation,
    }


# ---- tools --------------------------------------------------------------


def list_topics(ctx: ToolContext, args: ListTopicsArgs) -> Dict[str, Any]:
    return {
        "topics": ctx.bank.summary(),
        "total_items": len(ctx.bank),
        "generation_enabled": ctx.generation_enabled,
    }


def match_topic(ctx: ToolContext, args: MatchTopicArgs) -> Dict[str, Any]:
    return match_payload(args.objective, ctx.match(args.objective), ctx.bank)


async def generate(ctx: ToolContext, args: GenerateArgs) -> Dict[str, Any]:
    match = ctx.match(args.objective)

    if should_use_item_bank(match):
        candidates = ctx.bank.find_items(match.topic, args.difficulty)
        if candidates:
            item = ctx.rng.choice(candidates)
            payload = _item_payload(args.user_id, item, item.topic)
            payload.update(source="curated", match_confidence=match.confidence, match_type=match.match_type)
            return payload

    cached = store.find_cached_item(ctx.db, args.objective, args.difficulty)
    if cached is not None:
        payload = _item_payload(args.user_id, cached, cached.topic or args.objective)
        payload.update(source="ai-generated-cached", quality=cached.quality, generated_for=cached.objective)
        return payload

    if not ctx.generation_enabled:
        return {
            "error": "no_match_generation_disabled",
            "message": f'No items found for "{args.objective}" and AI generation is not configured',
            "objective": args.objective,
            "closest_topic": match.topic,
            "confidence": match.confidence,
            "available_topics": ctx.bank.topics()[:20],
            "needs_generation": True,
            "suggested_prompt": f"Generate a {args.difficulty} multiple choice question about: {args.objective}",
        }

    try:
        async with ctx.generator_factory() as client:
            generated = await generate_item(client, args.objective, args.difficulty, match.topic)
    except (GenerationError, RuntimeError, ValueError, httpx.HTTPError) as e:
        logger.warning("Generation failed for %r: %s", args.objective, e)
        return {
            "error": "generation_failed",
            "message": str(e) or "Failed to generate question",
            "objective": args.objective,
            "closest_topic": match.topic,
            "confidence": match.confidence,
        }

    try:
        store.store_generated_item(ctx.db, generated)
    except SQLAlchemyError as e:
        ctx.db.rollback()
        logger.error("Error storing generated item %s: %s", generated.id, e)

    payload = _item_payload(args.user_id, generated, generated.topic or args.objective)
    payload.update(
        source="ai-generated",
        quality=generated.quality,
        generated_for=generated.objective,
        model=generated.model,
    )
    return payload


def add_item(ctx: ToolContext, args: AddItemArgs) -> Dict[str, Any]:
    item = GeneratedItem(
        id=new_item_id("ext"),
        objective=args.objective,
        objective_normalized=normalize_objective(args.objective),
        topic=args.topic or None,
        difficulty=args.difficulty,
        stem=args.stem,
        code=args.code or None,
        options=args.options,
        correct=args.correct.upper(),
        feedback=args.feedback,
        source=args.source or "external",
        model=None,
    )
    try:
        store.store_generated_item(ctx.db, item, use_count=0)
    except SQLAlchemyError as e:
        ctx.db.rollback()
        logger.error("Error storing external item: %s", e)
        return {"success": False, "error": "storage_failed", "message": str(e)}
    return {
        "success": True,
        "item_id": item.id,
        "objective": item.objective,
        "topic": item.topic,
        "difficulty": item.difficulty,
        "source": item.source,
        "message": "Item stored successfully",
    }


def record(ctx: ToolContext, args: RecordArgs) -> Dict[str, Any]:
    was_correct, logged, mastery = store.record_answer(
        ctx.db,
        user_id=args.user_id,
        objective=args.objective,
        selected_answer=args.selected_answer,
        correct_answer=args.correct_answer,
        item_id=args.item_id,
        session_id=args.session_id,
        latency_ms=args.latency_ms,
        difficulty=args.difficulty,
    )
    payload: Dict[str, Any] = {
        "user_id": args.user_id,
        "objective": args.objective,
        "selected_answer": args.selected_answer,
        "correct_answer": args.correct_answer,
        "was_correct": was_correct,
        "response_logged": logged,
    }
    if mastery is not None:
        stats = store.mastery_payload(mastery)
        stats.pop("objective")
        payload.update(stats)
    return payload


def get_status(ctx: ToolContext, args: StatusArgs) -> Dict[str, Any]:
    if args.objective:
        row = store.get_mastery(ctx.db, args.user_id, args.objective)
        if row is None:
            return {
                "user_id": args.user_id,
                "objective": args.objective,
                "status": "no_data",
                "message": "No mastery data found for this objective",
            }
        return {"user_id": args.user_id, **store.mastery_payload(row)}

    objectives = [store.mastery_payload(row) for row in store.list_mastery(ctx.db, args.user_id)]
    payload: Dict[str, Any] = {"user_id": args.user_id, "objectives": objectives}
    if not objectives:
        payload["message"] = "No mastery data found for this user"
    return payload


Handler = Callable[[ToolContext, Any], Union[Dict[str, Any], Awaitable[Dict[str, Any]]]]

TOOLS: Dict[str, tuple[Type[BaseModel], Handler, str]] = {
    "mcq_list_topics": (ListTopicsArgs, list_topics, "List all available assessment topics in the item bank"),
    "mcq_generate": (
        GenerateArgs,
        generate,
        "Get a multiple choice question. Serves from the item bank when the objective matches a topic, otherwise generates one.",
    ),
    "mcq_match_topic": (
        MatchTopicArgs,
        match_topic,
        "Check if an objective matches an existing topic in the item bank (preflight check)",
    ),
    "mcq_add_item": (AddItemArgs, add_item, "Submit an MCQ item to be stored for future use"),
    "mcq_record": (RecordArgs, record, "Record a learner's MCQ response and update the mastery estimate"),
    "mcq_get_status": (StatusArgs, get_status, "Get mastery status for a user, optionally filtered by objective"),
}


async def call_tool(ctx: ToolContext, name: str, arguments: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if name not in TOOLS:
        raise UnknownToolError(f"Unknown tool: {name}")
    args_model, handler, _ = TOOLS[name]
    try:
        args = args_model.model_validate(arguments or {})
    except ValidationError as e:
        raise ToolArgumentError(f"Invalid arguments for {name}: {e}") from e
    result = handler(ctx, args)
    if inspect.isawaitable(result):
        result = await result
    return result
