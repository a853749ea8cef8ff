"""Alias table: short phrases and abbreviations mapped to canonical topic ids.

The table is authored data. It is built once at startup (from the built-in
mapping below or from a JSON file) and is read-only afterwards.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple

from .normalize import normalize

logger = logging.getLogger(__name__)


DEFAULT_ALIASES: Dict[str, str] = {
    # React
    "useeffect": "react-hooks",
    "use effect": "react-hooks",
    "usestate": "react-state",
    "use state": "react-state",
    "usecontext": "react-hooks",
    "usememo": "react-hooks",
    "usecallback": "react-hooks",
    "usereducer": "react-state",
    "useref": "react-hooks",
    "react hooks": "react-hooks",
    "hooks": "react-hooks",
    "react state": "react-state",
    "state management": "react-state",
    "react rendering": "react-rendering",
    "virtual dom": "react-rendering",
    "reconciliation": "react-rendering",
    "react patterns": "react-patterns",
    "higher order components": "react-patterns",
    "hoc": "react-patterns",
    "render props": "react-patterns",
    "compound components": "react-patterns",
    # JavaScript core
    "closures": "js-closures",
    "closure": "js-closures",
    "lexical scope": "js-closures",
    "lexical scoping": "js-closures",
    "async/await": "js-async",
    "async await": "js-async",
    "promises": "js-async",
    "promise": "js-async",
    "asynchronous": "js-async",
    "callbacks": "js-async",
    "event loop": "js-async",
    "this keyword": "js-this",
    "this binding": "js-this",
    "call apply bind": "js-this",
    "arrow functions": "js-this",
    "prototypes": "js-prototypes",
    "prototype chain": "js-prototypes",
    "inheritance": "js-prototypes",
    "prototypal inheritance": "js-prototypes",
    "microtasks": "js-timers",
    "settimeout": "js-timers",
    "setinterval": "js-timers",
    "timers": "js-timers",
    "design patterns": "js-patterns",
    "module pattern": "js-patterns",
    "singleton": "js-patterns",
    "factory": "js-patterns",
    "javascript fundamentals": "js-fundamentals",
    "js basics": "js-fundamentals",
    "variables": "js-fundamentals",
    "hoisting": "js-fundamentals",
    "scope": "js-fundamentals",
    # HTML / CSS
    "dom events": "html-events",
    "event handling": "html-events",
    "event bubbling": "html-events",
    "event delegation": "html-events",
    "tailwind": "css-tailwind",
    "tailwind css": "css-tailwind",
    "css": "css-tailwind",
    # Git
    "git": "git-basics",
    "version control": "git-basics",
    "git commands": "git-basics",
    "branching": "git-basics",
    "merge": "git-basics",
    "rebase": "git-basics",
    # Mathematics
    "algebra": "math-algebra-1",
    "algebra 1": "math-algebra-1",
    "algebra 2": "math-algebra-2",
    "linear equations": "math-algebra-1",
    "quadratic equations": "math-algebra-2",
    "geometry": "math-geometry",
    "triangles": "math-geometry",
    "circles": "math-geometry",
    "area": "math-geometry",
    "perimeter": "math-geometry",
    "calculus": "math-calculus",
    "derivatives": "math-calculus",
    "integrals": "math-calculus",
    "limits": "math-calculus",
    "statistics": "math-statistics",
    "probability": "math-probability",
    "permutations": "math-probability",
    "combinations": "math-probability",
    "arithmetic": "math-arithmetic",
    "fractions": "math-arithmetic",
    "decimals": "math-arithmetic",
    "percentages": "math-percentages",
    "percent": "math-percentages",
    "profit loss": "math-percentages",
    "interest": "math-percentages",
    "pre-algebra": "math-pre-algebra",
    "prealgebra": "math-pre-algebra",
    "ratios": "math-pre-algebra",
    "word problems": "math-word-problems",
    # Science
    "biology": "science-biology",
    "cells": "science-biology",
    "genetics": "science-biology",
    "evolution": "science-biology",
    "ecology": "science-biology",
    "chemistry": "science-chemistry",
    "atoms": "science-chemistry",
    "molecules": "science-chemistry",
    "chemical reactions": "science-chemistry",
    "periodic table": "science-chemistry",
    "physics": "science-physics",
    "forces": "science-physics",
    "motion": "science-physics",
    "energy": "science-physics",
    "electricity": "science-physics",
    "magnetism": "science-physics",
    "earth science": "science-earth",
    "geology": "science-earth",
    "weather": "science-earth",
    "climate": "science-earth",
    "environmental science": "science-environmental",
    # Social studies
    "us history": "history-us",
    "american history": "history-us",
    "world history": "history-world",
    "geography": "geography",
    "economics": "economics",
    "microeconomics": "economics",
    "macroeconomics": "economics",
    "civics": "civics",
    "government": "civics",
    "politics": "civics",
    # Language arts
    "reading comprehension": "language-arts-reading",
    "reading": "language-arts-reading",
    # Vibe coding / AI
    "prompting": "vibe-prompting",
    "prompt engineering": "vibe-prompting",
    "vibe coding": "vibe-prompting",
    "ai prompts": "vibe-prompting",
    "code review": "vibe-review",
    "ai workflow": "vibe-workflow",
}

# Subject prefixes stripped from topic ids ("js-closures" -> "closures").
DEFAULT_TOPIC_PREFIXES: Tuple[str, ...] = (
    "js", "react", "math", "science", "html", "css", "git", "vibe", "reading",
)
# Leading subject words stripped from objectives ("javascript closures" -> "closures").
DEFAULT_OBJECTIVE_PREFIXES: Tuple[str, ...] = ("javascript", "react", "math", "science")


class AliasTable:
    """Immutable normalized-phrase -> topic mapping."""

    def __init__(self, entries: Optional[Mapping[str, str]] = None) -> None:
        table: Dict[str, str] = {}
        for phrase, topic in (entries or {}).items():
            key = normalize(str(phrase))
            if not key or not topic:
                continue
            table[key] = str(topic)
        self._table = MappingProxyType(table)

    def __getitem__(self, key: str) -> str:
        return self._table[key]

    def __contains__(self, key: object) -> bool:
        return key in self._table

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def items(self):
        return self._table.items()

    def __repr__(self) -> str:
        return f"AliasTable({len(self._table)} entries)"

    def lookup(self, objective: str) -> Optional[str]:
        """Return the canonical topic for ``objective`` or None."""
        return self._table.get(normalize(objective))

    @classmethod
    def default(cls) -> "AliasTable":
        return cls(DEFAULT_ALIASES)

    @classmethod
    def from_json(cls, path: str | Path) -> "AliasTable":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Alias table not found: {path!s}")
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Alias table {path!s} must be a JSON object of phrase -> topic")
        table = cls(data)
        logger.info("Loaded %d topic aliases from %s", len(table), path)
        return table


def lookup_alias(objective: str, table: Optional[AliasTable] = None) -> Optional[str]:
    return (table if table is not None else _DEFAULT_TABLE).lookup(objective)


_DEFAULT_TABLE = AliasTable.default()
