"""
Claude API Client

Single-shot completions used for profiling, query generation and
validation, alias enrichment and semantic confirmation. Tracks token
usage across calls.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import anthropic

from ..errors import ProviderError

logger = logging.getLogger(__name__)


@dataclass
class TokenUsage:
    """Track token usage for cost calculation."""
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    @property
    def estimated_cost(self) -> float:
        """Estimate cost at $3/1M input and $15/1M output tokens."""
        return (self.input_tokens / 1_000_000) * 3.0 + (self.output_tokens / 1_000_000) * 15.0


class ClaudeClient:
    """
    Async Claude client.

    Usage:
        claude = ClaudeClient(api_key=settings.ANTHROPIC_API_KEY)
        text = await claude.complete("Return JSON ...")
    """

    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    MAX_TOKENS = 4000
    TEMPERATURE = 0.3

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[anthropic.AsyncAnthropic] = None,
    ):
        """
        Initialize Claude client.

        Args:
            api_key: Anthropic API key
            model: Model to use (defaults to DEFAULT_MODEL)
            client: Preconfigured AsyncAnthropic instance
        """
        if client is None and not api_key:
            raise ValueError("ANTHROPIC_API_KEY not provided")

        self.model = model or self.DEFAULT_MODEL
        self.client = client or anthropic.AsyncAnthropic(api_key=api_key)

        self.total_usage = TokenUsage()
        self.call_count = 0

    async def complete(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: int = MAX_TOKENS,
        temperature: float = TEMPERATURE,
    ) -> str:
        """
        Send a prompt and return the text of the reply.

        Raises:
            ProviderError: When the API call fails
        """
        kwargs = {
            "model": self.model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system

        try:
            response = await self.client.messages.create(**kwargs)
        except anthropic.APIStatusError as e:
            raise ProviderError(f"Claude API error: {e}", provider="claude", status_code=e.status_code) from e
        except anthropic.APIError as e:
            raise ProviderError(f"Claude API error: {e}", provider="claude") from e

        content = "".join(block.text for block in response.content if hasattr(block, "text"))

        self.total_usage.input_tokens += response.usage.input_tokens
        self.total_usage.output_tokens += response.usage.output_tokens
        self.call_count += 1
        logger.debug(
            f"Claude call: {response.usage.input_tokens} in, "
            f"{response.usage.output_tokens} out"
        )
        return content
