"""On-demand MCQ generation for objectives the curated bank does not cover."""

from __future__ import annotations

import json
import logging
import re
import uuid
from typing import Any, Dict, List, Optional, Protocol

from pydantic import BaseModel

from .item_bank import Difficulty, Feedback, Option
from .matching import normalize_objective
from .settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

ANSWER_IDS = ["A", "B", "C", "D"]

CODE_TERMS = [
    "javascript", "js", "react", "typescript", "ts", "python", "java", "css",
    "html", "node", "sql", "git", "code", "programming", "function", "class",
    "variable", "loop", "array", "object", "api", "async", "promise",
]


class GenerationError(RuntimeError):
    pass


class TextGenerator(Protocol):
    model_name: str

    async def generate(self, prompt: str, *, thinking_budget: Optional[int] = None) -> str: ...


class GeneratedItem(BaseModel):
    id: str
    objective: str
    objective_normalized: str
    topic: Optional[str] = None
    difficulty: Difficulty = "medium"
    stem: str
    code: Optional[str] = None
    options: List[Option]
    correct: str
    feedback: Feedback
    source: str = "ai-generated"
    model: Optional[str] = None
    quality: str = "unreviewed"

    def options_map(self) -> Dict[str, str]:
        return {opt.id: opt.text for opt in self.options}


def is_generation_enabled(config: Optional[Settings] = None) -> bool:
    return (config or default_settings).generation_enabled


def should_include_code(objective: str) -> bool:
    lower = (objective or "").lower()
    return any(term in lower for term in CODE_TERMS)


def new_item_id(prefix: str = "gen") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:13]}"


def build_generation_prompt(objective: str, difficulty: str) -> str:
    if should_include_code(objective):
        code_instruction = (
            "This topic involves programming. Include a relevant code snippet in the \"code\" field "
            "(escape it properly for JSON)."
        )
    else:
        code_instruction = "This is not a programming topic. Set \"code\" to null."
    return (
        "You are an expert educational content creator. Generate ONE high-quality multiple choice question.\n"
        f"Topic/Objective: {objective}\n"
        f"Difficulty Level: {difficulty}\n\n"
        "Requirements:\n"
        "1. A clear, unambiguous question stem.\n"
        "2. Exactly 4 options with ids A, B, C, D.\n"
        "3. Exactly one option is correct; distractors are plausible but definitively wrong.\n"
        "4. A brief explanation of why the correct answer is right.\n\n"
        "Difficulty guidelines:\n"
        "- easy: basic recall or simple application\n"
        "- medium: requires understanding and some analysis\n"
        "- hard: requires synthesis, evaluation, or complex problem-solving\n\n"
        f"{code_instruction}\n\n"
        "Return ONLY compact JSON with keys: stem (string), code (string or null), "
        "options (array of 4 objects {id, text}), correct (one of A-D), "
        "feedback (object with keys correct, incorrect, explanation).\n"
        "No markdown, no extra commentary."
    )


def extract_json_object(text: str) -> Dict[str, Any]:
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        pass
    code_block = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", text or "")
    if code_block:
        try:
            return json.loads(code_block.group(1))
        except ValueError:
            pass
    first = (text or "").find("{")
    last = (text or "").rfind("}")
    if first != -1 and last > first:
        try:
            return json.loads(text[first : last + 1])
        except ValueError:
            pass
    raise GenerationError(f"Model did not return valid JSON: {(text or '')[:200]}")


def parse_generated_item(
    raw: str,
    *,
    objective: str,
    difficulty: str,
    inferred_topic: Optional[str],
    model: Optional[str],
) -> GeneratedItem:
    data = extract_json_object(raw)
    if not isinstance(data, dict):
        raise GenerationError("Model output is not a JSON object")
    stem = data.get("stem")
    options = data.get("options")
    correct = data.get("correct")
    feedback = data.get("feedback")
    if not isinstance(stem, str) or not stem.strip() or not options or not correct or not isinstance(feedback, dict):
        raise GenerationError("Invalid response structure from model")
    if not isinstance(options, list) or len(options) != 4:
        count = len(options) if isinstance(options, list) else 0
        raise GenerationError(f"Expected 4 options, got {count}")
    correct = str(correct).strip().upper()
    if correct not in ANSWER_IDS:
        raise GenerationError(f"Invalid correct answer: {correct}")

    parsed_options: List[Option] = []
    for idx, opt in enumerate(options):
        if isinstance(opt, dict):
            opt_id = str(opt.get("id") or ANSWER_IDS[idx]).strip().upper()
            opt_text = str(opt.get("text", "")).strip()
        else:
            opt_id, opt_text = ANSWER_IDS[idx], str(opt).strip()
        parsed_options.append(Option(id=opt_id, text=opt_text))

    code = data.get("code")
    return GeneratedItem(
        id=new_item_id("gen"),
        objective=objective,
        objective_normalized=normalize_objective(objective),
        topic=inferred_topic,
        difficulty=difficulty,
        stem=stem.strip(),
        code=code if isinstance(code, str) and code.strip() else None,
        options=parsed_options,
        correct=correct,
        feedback=Feedback(
            correct=str(feedback.get("correct") or "Correct!"),
            incorrect=str(feedback.get("incorrect") or "Not quite. Try again!"),
            explanation=str(feedback.get("explanation") or "No explanation provided."),
        ),
        model=model,
    )


async def generate_item(
    client: TextGenerator,
    objective: str,
    difficulty: str = "medium",
    inferred_topic: Optional[str] = None,
) -> GeneratedItem:
    prompt = build_generation_prompt(objective, difficulty)
    raw = await client.generate(prompt, thinking_budget=0)
    item = parse_generated_item(
        raw,
        objective=objective,
        difficulty=difficulty,
        inferred_topic=inferred_topic,
        model=getattr(client, "model_name", None),
    )
    logger.info("Generated item %s for objective %r (%s)", item.id, objective, difficulty)
    return item
