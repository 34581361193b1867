from __future__ import annotations
import logging
import httpx
from typing import Any, AsyncIterator, Dict, Optional
from .settings import settings

logger = logging.getLogger(__name__)


class LLMUnavailableError(RuntimeError):
	"""The model could not be reached or answered with something other than a completion."""


class GeminiClient:
	def __init__(self, api_key: Optional[str] = None, *, base_url: Optional[str] = None, model: Optional[str] = None) -> None:
		self.api_key = api_key or settings.gemini_api_key
		self.model = model or settings.gemini_model
		self.provider = settings.gemini_provider
		if self.provider == "vertex":
			region = settings.vertex_region
			project = settings.vertex_project or "placeholder-project"
			# Vertex AI Generative REST endpoint (API key via header)
			self.base_url = base_url or (
				f"https://{region}-aiplatform.googleapis.com/v1/projects/{project}/locations/{region}/publishers/google/models/{self.model}:generateContent"
			)
			self._auth_in_query = False
		else:
			# Google AI Studio (Generative Language API)
			self.base_url = base_url or f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
			self._auth_in_query = True
		self._client = httpx.AsyncClient(timeout=settings.gemini_timeout_seconds)

	async def generate(self, prompt: str) -> str:
		"""Send one text prompt and return the text of the first candidate.

		Every failure (missing key, transport error, non-2xx status, unexpected
		body) is raised as LLMUnavailableError. Nothing is retried.
		"""
		if not self.api_key:
			raise LLMUnavailableError("GEMINI_API_KEY is not configured")
		payload: Dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
		params: Dict[str, Any] = {}
		headers: Dict[str, str] = {}
		if self._auth_in_query:
			params["key"] = self.api_key
		else:
			headers["x-goog-api-key"] = self.api_key
		try:
			r = await self._client.post(self.base_url, params=params, headers=headers, json=payload)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			logger.error("Gemini returned HTTP %s: %s", http_err.response.status_code, http_err.response.text)
			raise LLMUnavailableError(f"Gemini returned HTTP {http_err.response.status_code}") from http_err
		except httpx.RequestError as net_err:
			logger.error("Gemini request failed: %r", net_err)
			raise LLMUnavailableError(f"Gemini request failed: {net_err}") from net_err
		try:
			data = r.json()
			return data["candidates"][0]["content"]["parts"][0]["text"]
		except (ValueError, KeyError, IndexError, TypeError) as err:
			logger.error("Unexpected Gemini response: %s", r.text)
			raise LLMUnavailableError("Unexpected Gemini response") from err

	async def aclose(self) -> None:
		await self._client.aclose()


async def get_llm_client() -> AsyncIterator[GeminiClient]:
	client = GeminiClient()
	try:
		yield client
	finally:
		await client.aclose()
