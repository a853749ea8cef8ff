from __future__ import annotations
import logging
from functools import lru_cache
from typing import Any, Callable, Optional
from .gemini_client import GeminiClient
from .generation import is_generation_enabled
from .item_bank import ItemBank
from .matching import AliasTable, DEFAULT_OBJECTIVE_PREFIXES, DEFAULT_TOPIC_PREFIXES, MatcherConfig, TopicMatcher
from .settings import settings, split_csv

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_item_bank() -> ItemBank:
	return ItemBank.from_json(settings.item_bank_path)


def build_matcher_config() -> MatcherConfig:
	if settings.topic_aliases_path:
		aliases = AliasTable.from_json(settings.topic_aliases_path)
	else:
		aliases = AliasTable.default()
	return MatcherConfig(
		aliases=aliases,
		topic_prefixes=split_csv(settings.topic_prefixes) or DEFAULT_TOPIC_PREFIXES,
		objective_prefixes=split_csv(settings.objective_prefixes) or DEFAULT_OBJECTIVE_PREFIXES,
	)


@lru_cache(maxsize=1)
def get_matcher() -> TopicMatcher:
	config = build_matcher_config()
	logger.info("Topic matcher ready: %d aliases, %d topic prefixes", len(config.aliases), len(config.topic_prefixes))
	return TopicMatcher(config)


def get_generator_factory() -> Optional[Callable[[], Any]]:
	# GeminiClient raises without an API key, so only hand out a factory when configured
	if not is_generation_enabled(settings):
		return None
	return GeminiClient
