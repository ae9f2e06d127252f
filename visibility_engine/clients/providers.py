"""
Scan Query Providers

The AI assistants whose answers are scanned for brand mentions:
- openai - Chat Completions over httpx
- gemini - generateContent over httpx
- claude - Messages API through the anthropic SDK

Every provider raises ProviderError on failure; retries are applied by
the orchestrator, not here.
"""

import logging
from typing import Dict, List, Optional

import httpx

from ..errors import ProviderError
from ..utils.config import Settings
from .claude import ClaudeClient

logger = logging.getLogger(__name__)

MAX_TOKENS = 1500
TEMPERATURE = 0.3


class OpenAIProvider:
    """OpenAI Chat Completions provider."""

    name = "openai"
    BASE_URL = "https://api.openai.com/v1"

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", timeout: float = 60.0):
        self.model = model
        self._client = httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=httpx.Timeout(timeout),
        )

    async def ask(self, query: str) -> str:
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": query}],
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
        }
        data = await _post_json(self._client, "/chat/completions", payload, self.name)
        choices = data.get("choices") or []
        if not choices:
            return ""
        return choices[0].get("message", {}).get("content") or ""

    async def close(self):
        await self._client.aclose()


class GeminiProvider:
    """Google Gemini generateContent provider."""

    name = "gemini"
    BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

    def __init__(self, api_key: str, model: str = "gemini-1.5-flash", timeout: float = 60.0):
        self.api_key = api_key
        self.model = model
        self._client = httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers={"Content-Type": "application/json"},
            timeout=httpx.Timeout(timeout),
        )

    async def ask(self, query: str) -> str:
        payload = {
            "contents": [{"parts": [{"text": query}]}],
            "generationConfig": {
                "maxOutputTokens": MAX_TOKENS,
                "temperature": TEMPERATURE,
            },
        }
        data = await _post_json(
            self._client,
            f"/{self.model}:generateContent",
            payload,
            self.name,
            params={"key": self.api_key},
        )
        if data.get("error"):
            raise ProviderError(f"Gemini API error: {data['error'].get('message')}", provider=self.name)

        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = candidates[0].get("content", {}).get("parts") or []
        return parts[0].get("text", "") if parts else ""

    async def close(self):
        await self._client.aclose()


class ClaudeProvider:
    """Claude answering scan queries as an assistant would."""

    name = "claude"

    def __init__(self, client: ClaudeClient):
        self.client = client

    async def ask(self, query: str) -> str:
        return await self.client.complete(query, max_tokens=MAX_TOKENS, temperature=TEMPERATURE)

    async def close(self):
        return None


class ProviderRegistry:
    """
    Routes scan queries to providers by name.

    Usage:
        registry = ProviderRegistry.from_settings(settings, claude)
        answer = await registry.query("best scheduling tool?", "openai")
    """

    def __init__(self, providers: Optional[Dict[str, object]] = None):
        self.providers: Dict[str, object] = dict(providers or {})

    @classmethod
    def from_settings(cls, settings: Settings, claude: Optional[ClaudeClient] = None) -> "ProviderRegistry":
        """Build the providers named in ACTIVE_PROVIDERS that have credentials."""
        providers: Dict[str, object] = {}
        for name in settings.active_providers:
            if name == "openai" and settings.OPENAI_API_KEY:
                providers[name] = OpenAIProvider(settings.OPENAI_API_KEY, settings.OPENAI_MODEL, settings.API_TIMEOUT)
            elif name == "gemini" and settings.GEMINI_API_KEY:
                providers[name] = GeminiProvider(settings.GEMINI_API_KEY, settings.GEMINI_MODEL, settings.API_TIMEOUT)
            elif name == "claude" and claude is not None:
                providers[name] = ClaudeProvider(claude)
            else:
                logger.warning(f"Provider '{name}' is active but not configured, skipping")
        return cls(providers)

    @property
    def names(self) -> List[str]:
        return list(self.providers)

    async def query(self, query: str, provider: str) -> str:
        """
        Ask one provider a scan query.

        Raises:
            ProviderError: Unknown provider or failed call
        """
        client = self.providers.get(provider)
        if client is None:
            raise ProviderError(f"Unknown provider: {provider}", provider=provider, status_code=400)
        return await client.ask(query)

    async def close(self):
        for client in self.providers.values():
            await client.close()


async def _post_json(
    client: httpx.AsyncClient,
    path: str,
    payload: dict,
    provider: str,
    params: Optional[dict] = None,
) -> dict:
    try:
        response = await client.post(path, json=payload, params=params)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        logger.warning(f"{provider} returned HTTP {status}")
        raise ProviderError(
            f"{provider} API error {status}: {e.response.text[:200]}",
            provider=provider,
            status_code=status,
        ) from e
    except httpx.RequestError as e:
        raise ProviderError(f"{provider} request failed: {e}", provider=provider) from e
    return response.json()
