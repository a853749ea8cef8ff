from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_ITEM_BANK = PACKAGE_DIR / "data" / "item_bank.json"


class Settings(BaseSettings):
	# LLM used for on-demand item generation. Provider is "ai_studio" or "vertex".
	gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
	gemini_provider: str = Field(default="ai_studio", validation_alias="GEMINI_PROVIDER")
	gemini_model: str = Field(default="gemini-2.5-flash", validation_alias="GEMINI_MODEL")
	vertex_region: str = Field(default="us-central1", validation_alias="GEMINI_VERTEX_REGION")
	vertex_project: str | None = Field(default=None, validation_alias="GEMINI_VERTEX_PROJECT")
	generation_timeout_seconds: float = Field(default=30.0, validation_alias="GENERATION_TIMEOUT_SECONDS")

	# OpenRouter fallback (optional)
	openrouter_api_key: str | None = Field(default=None, validation_alias="OPENROUTER_API_KEY")
	openrouter_model: str = Field(default="x-ai/grok-4-fast:free", validation_alias="OPENROUTER_MODEL")
	openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1/chat/completions", validation_alias="OPENROUTER_BASE_URL")
	openrouter_referer: str = Field(default="https://localhost", validation_alias="OPENROUTER_HTTP_REFERER")
	openrouter_title: str = Field(default="MCQ Assessment Service", validation_alias="OPENROUTER_TITLE")

	# Storage
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")
	item_bank_path: str = Field(default=str(DEFAULT_ITEM_BANK), validation_alias="ITEM_BANK_PATH")

	# Matcher data. Prefix lists are comma-separated; empty means built-in defaults.
	topic_aliases_path: str | None = Field(default=None, validation_alias="TOPIC_ALIASES_PATH")
	topic_prefixes: str = Field(default="", validation_alias="TOPIC_PREFIXES")
	objective_prefixes: str = Field(default="", validation_alias="OBJECTIVE_PREFIXES")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

	@property
	def generation_enabled(self) -> bool:
		return bool(self.gemini_api_key)


def split_csv(value: str | None) -> tuple[str, ...]:
	return tuple(part.strip().lower() for part in (value or "").split(",") if part.strip())


settings = Settings()
