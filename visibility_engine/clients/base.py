"""
Collaborator Signatures

The scan pipeline depends only on these call shapes, so any client
(or test double) that matches them can be injected.
"""

from typing import Awaitable, Callable

# Single-shot "ask a model for structured text"
LLMCall = Callable[[str], Awaitable[str]]

# Run a scan query against a named provider, returning the raw answer
ProviderQuery = Callable[[str, str], Awaitable[str]]

# Fetch a URL and return its readable page text
PageFetch = Callable[[str], Awaitable[str]]
