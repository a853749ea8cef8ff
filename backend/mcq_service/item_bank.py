from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

Difficulty = Literal["easy", "medium", "hard"]
DIFFICULTIES: List[str] = ["easy", "medium", "hard"]


class Option(BaseModel):
    id: str
    text: str


class Feedback(BaseModel):
    correct: str = "Correct!"
    incorrect: str = "Not quite. Try again!"
    explanation: str = "No explanation provided."


class Item(BaseModel):
    id: str
    topic: str
    difficulty: Difficulty
    stem: str
    code: Optional[str] = None
    options: List[Option] = Field(min_length=2)
    correct: str
    feedback: Feedback = Field(default_factory=Feedback)

    def options_map(self) -> Dict[str, str]:
        return {opt.id: opt.text for opt in self.options}


class ItemBank:
    """Curated items indexed by topic (lowercase) and difficulty."""

    def __init__(self, items: List[Item]) -> None:
        self.items = list(items)
        self._by_topic: Dict[str, List[Item]] = {}
        self._by_difficulty: Dict[str, List[Item]] = {d: [] for d in DIFFICULTIES}
        self._topics: List[str] = []
        for item in self.items:
            key = item.topic.lower()
            if key not in self._by_topic:
                self._by_topic[key] = []
                self._topics.append(item.topic)
            self._by_topic[key].append(item)
            self._by_difficulty[item.difficulty].append(item)

    def __len__(self) -> int:
        return len(self.items)

    def topics(self) -> List[str]:
        """Distinct topics in first-seen order."""
        return list(self._topics)

    def items_for(self, topic: Optional[str]) -> List[Item]:
        if not topic:
            return []
        return list(self._by_topic.get(topic.lower(), []))

    def find_items(self, topic: str, difficulty: str) -> List[Item]:
        items = self.items_for(topic)
        same_level = [i for i in items if i.difficulty == difficulty]
        # Any difficulty of the topic beats generating
        return same_level or items

    def summary(self) -> List[Dict[str, Any]]:
        rows = []
        for topic in self._topics:
            items = self._by_topic[topic.lower()]
            levels = [d for d in DIFFICULTIES if any(i.difficulty == d for i in items)]
            rows.append({"topic": topic, "item_count": len(items), "difficulties": levels})
        return rows

    @classmethod
    def from_json(cls, path: str | Path) -> "ItemBank":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Item bank not found: {path!s}")
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        raw_items = data.get("items") if isinstance(data, dict) else None
        if not isinstance(raw_items, list):
            raise ValueError(f"Item bank {path!s} must be an object with an 'items' array")
        try:
            items = [Item.model_validate(row) for row in raw_items]
        except ValidationError as e:
            raise ValueError(f"Invalid item in {path!s}: {e}") from e
        bank = cls(items)
        logger.info("Item bank: %d items across %d topics (%s)", len(bank), len(bank.topics()), path)
        return bank
