from __future__ import annotations
import logging
import httpx
from typing import Any, Dict, Optional
from .settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class GeminiClient:
	def __init__(self, api_key: Optional[str] = None, *, model: Optional[str] = None, config: Optional[Settings] = None) -> None:
		cfg = config or default_settings
		self.api_key = api_key or cfg.gemini_api_key
		if not self.api_key:
			raise ValueError("GEMINI_API_KEY is not configured")
		self.model = model or cfg.gemini_model
		self.provider = cfg.gemini_provider
		if self.provider == "vertex":
			region = cfg.vertex_region
			project = cfg.vertex_project or "placeholder-project"
			self.base_url = (
				f"https://{region}-aiplatform.googleapis.com/v1/projects/{project}/locations/{region}/publishers/google/models/{self.model}:generateContent"
			)
			self._auth_in_query = False
		else:
			self.base_url = f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
			self._auth_in_query = True
		timeout = cfg.generation_timeout_seconds
		self._client = httpx.AsyncClient(timeout=timeout)
		self._openrouter_api_key = cfg.openrouter_api_key
		self._openrouter_model = cfg.openrouter_model
		self._openrouter_base_url = cfg.openrouter_base_url
		self._openrouter_headers = {
			"Authorization": f"Bearer {self._openrouter_api_key}" if self._openrouter_api_key else "",
			"Content-Type": "application/json",
			"HTTP-Referer": cfg.openrouter_referer,
			"X-Title": cfg.openrouter_title,
		}
		self._fallback_client: Optional[httpx.AsyncClient] = httpx.AsyncClient(timeout=timeout) if self._openrouter_api_key else None

	@property
	def model_name(self) -> str:
		return f"{self.provider}:{self.model}"

	async def __aenter__(self) -> "GeminiClient":
		return self

	async def __aexit__(self, *exc_info: Any) -> None:
		await self.aclose()

	async def generate(self, prompt: str, *, thinking_budget: Optional[int] = None) -> str:
		payload: Dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
		if thinking_budget is not None:
			payload["thinkingConfig"] = {"budgetTokens": int(thinking_budget)}
		try:
			return await self._post_gemini(payload)
		except (httpx.HTTPError, RuntimeError) as primary_err:
			if self._fallback_client is None:
				raise
			logger.warning("Gemini call failed (%s); retrying via OpenRouter", primary_err)
			return await self._fallback_generate(prompt, primary_err)

	async def _post_gemini(self, payload: Dict[str, Any]) -> str:
		params: Dict[str, Any] = {}
		headers: Dict[str, str] = {}
		if self._auth_in_query:
			params["key"] = self.api_key
		else:
			headers["x-goog-api-key"] = self.api_key
		try:
			r = await self._client.post(self.base_url, params=params, headers=headers, json=payload)
			r.raise_for_status()
		except httpx.HTTPStatusError:
			# Some models reject thinkingConfig; retry once without it
			if "thinkingConfig" not in payload:
				raise
			payload = {k: v for k, v in payload.items() if k != "thinkingConfig"}
			r = await self._client.post(self.base_url, params=params, headers=headers, json=payload)
			r.raise_for_status()
		try:
			data = r.json()
			return data["candidates"][0]["content"]["parts"][0]["text"]
		except (ValueError, KeyError, IndexError, TypeError) as e:
			raise RuntimeError(f"Unexpected Gemini response: {r.text[:200]}") from e

	async def _fallback_generate(self, prompt: str, primary_error: Exception) -> str:
		headers = {k: v for k, v in self._openrouter_headers.items() if v}
		payload: Dict[str, Any] = {
			"model": self._openrouter_model,
			"messages": [{"role": "user", "content": prompt}],
		}
		try:
			r = await self._fallback_client.post(self._openrouter_base_url, headers=headers, json=payload)
			r.raise_for_status()
			data = r.json()
			return data["choices"][0]["message"]["content"]
		except Exception as fallback_err:
			raise RuntimeError(
				f"Gemini primary call failed ({primary_error}); fallback via OpenRouter also failed"
			) from fallback_err

	async def aclose(self) -> None:
		await self._client.aclose()
		if self._fallback_client is not None:
			await self._fallback_client.aclose()
