"""
Clients Module

Concrete collaborators injected into the scan orchestrator.
"""

from .base import LLMCall, ProviderQuery, PageFetch
from .claude import ClaudeClient, TokenUsage
from .providers import ClaudeProvider, GeminiProvider, OpenAIProvider, ProviderRegistry
from .fetcher import PageFetcher, extract_text

__all__ = [
    # Call shapes
    "LLMCall",
    "ProviderQuery",
    "PageFetch",
    # Clients
    "ClaudeClient",
    "TokenUsage",
    "ClaudeProvider",
    "GeminiProvider",
    "OpenAIProvider",
    "ProviderRegistry",
    "PageFetcher",
    "extract_text",
]
