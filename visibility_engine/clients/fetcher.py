"""
Page Fetcher

Fetches a product page and reduces it to readable text for profiling.
"""

import logging
import re

import httpx

logger = logging.getLogger(__name__)

MAX_CONTENT = 15000


class PageFetcher:
    """Fetches pages and extracts text content."""

    def __init__(self, timeout: float = 15.0):
        self.client = httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={
                "User-Agent": "Mozilla/5.0 (compatible; VisibilityBot/1.0)",
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                "Accept-Language": "en-US,en;q=0.9",
            },
        )

    async def close(self):
        await self.client.aclose()

    async def fetch_text(self, url: str) -> str:
        """Fetch a page and return its text, or "" when it cannot be fetched."""
        if not url.startswith(("http://", "https://")):
            url = f"https://{url}"

        try:
            response = await self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(f"HTTP error fetching {url}: {e.response.status_code}")
            return ""
        except httpx.RequestError as e:
            logger.warning(f"Request error fetching {url}: {e}")
            return ""

        return extract_text(response.text)[:MAX_CONTENT]


def extract_text(html: str) -> str:
    """Extract readable text from HTML."""
    html = re.sub(r"<script[^>]*>.*?</script>", "", html, flags=re.DOTALL | re.IGNORECASE)
    html = re.sub(r"<style[^>]*>.*?</style>", "", html, flags=re.DOTALL | re.IGNORECASE)
    html = re.sub(r"<noscript[^>]*>.*?</noscript>", "", html, flags=re.DOTALL | re.IGNORECASE)

    text = re.sub(r"<[^>]+>", " ", html)
    return re.sub(r"\s+", " ", text).strip()
