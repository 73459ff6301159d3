from __future__ import annotations
import httpx
from typing import Any, AsyncIterator, Dict, Optional
from .settings import settings

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"
GEMINI_URL_TEMPLATE = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


class TextGenerationError(RuntimeError):
	pass


class TextGenerationClient:
	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		provider: Optional[str] = None,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.api_key = api_key or settings.llm_api_key
		if not self.api_key:
			raise ValueError("LLM_API_KEY is not configured")
		self.model = model or settings.llm_model
		self.provider = provider or settings.llm_provider
		if self.provider == "gemini":
			# Google AI Studio (Generative Language API), key passed as query param
			self.base_url = base_url or settings.llm_base_url or GEMINI_URL_TEMPLATE.format(model=self.model)
		elif self.provider == "openai":
			self.base_url = base_url or settings.llm_base_url or OPENAI_CHAT_URL
		else:
			raise ValueError(f"Unsupported LLM_PROVIDER: {self.provider}")
		self._client = httpx.AsyncClient(timeout=settings.llm_timeout_seconds, transport=transport)

	async def generate(self, prompt: str, *, max_tokens: int) -> str:
		"""Send one user-role prompt and return the first completion's text ("" if none)."""
		if self.provider == "gemini":
			return await self._generate_gemini(prompt, max_tokens)
		return await self._generate_chat(prompt, max_tokens)

	async def _generate_chat(self, prompt: str, max_tokens: int) -> str:
		payload: Dict[str, Any] = {
			"model": self.model,
			"messages": [{"role": "user", "content": prompt}],
			"max_tokens": max_tokens,
		}
		headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
		data = await self._post(payload, headers=headers)
		try:
			choices = data.get("choices") or []
			if not choices:
				return ""
			return choices[0]["message"].get("content") or ""
		except (KeyError, TypeError, AttributeError) as e:
			raise TextGenerationError(f"Unexpected completion response: {data}") from e

	async def _generate_gemini(self, prompt: str, max_tokens: int) -> str:
		payload: Dict[str, Any] = {
			"contents": [{"role": "user", "parts": [{"text": prompt}]}],
			"generationConfig": {"maxOutputTokens": max_tokens},
		}
		data = await self._post(payload, params={"key": self.api_key})
		try:
			candidates = data.get("candidates") or []
			if not candidates:
				return ""
			parts = candidates[0].get("content", {}).get("parts") or []
			if not parts:
				return ""
			return parts[0].get("text") or ""
		except (KeyError, TypeError, AttributeError) as e:
			raise TextGenerationError(f"Unexpected Gemini response: {data}") from e

	async def _post(
		self,
		payload: Dict[str, Any],
		*,
		headers: Optional[Dict[str, str]] = None,
		params: Optional[Dict[str, Any]] = None,
	) -> Dict[str, Any]:
		try:
			r = await self._client.post(self.base_url, params=params, headers=headers, json=payload)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			raise TextGenerationError(
				f"{self.provider} returned {http_err.response.status_code}"
			) from http_err
		except httpx.RequestError as net_err:
			raise TextGenerationError(f"{self.provider} request failed: {net_err}") from net_err
		try:
			return r.json()
		except ValueError as e:
			raise TextGenerationError(f"Non-JSON response: {r.text}") from e

	async def aclose(self) -> None:
		await self._client.aclose()


async def get_text_client() -> AsyncIterator[Optional[TextGenerationClient]]:
	# Summaries that short-circuit on missing data never need the client, so an
	# unconfigured key only fails once a prompt is actually sent
	if not settings.llm_api_key:
		yield None
		return
	client = TextGenerationClient()
	try:
		yield client
	finally:
		await client.aclose()
