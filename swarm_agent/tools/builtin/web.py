"""Web capabilities - search placeholder and page scraping."""

from typing import TYPE_CHECKING, Any

import httpx
from bs4 import BeautifulSoup

from swarm_agent.core.logging import get_logger
from swarm_agent.tools.base import (
    Capability,
    CapabilityDefinition,
    NetworkError,
    ParseError,
    ToolTimeoutError,
)

if TYPE_CHECKING:
    from swarm_agent.core.config import Settings

logger = get_logger("tools.builtin.web")

USER_AGENT = "swarm-agent/0.1 (+tool runtime)"


class SearchCapability(Capability):
    """Deterministic search placeholder.

    There is no search backend behind this: it echoes the query inside a
    fixed result list so tools that call ``search`` behave predictably.
    """

    @property
    def definition(self) -> CapabilityDefinition:
        return CapabilityDefinition(
            name="search",
            description="Placeholder web search returning fixed results",
            input_schema={
                "type": "object",
                "properties": {"query": {"type": "string", "description": "Search query"}},
                "required": ["query"],
                "additionalProperties": False,
            },
            timeout_seconds=5,
        )

    def execute(self, **kwargs: Any) -> str:
        query = kwargs["query"]
        logger.info(f"Search placeholder called for: {query}")
        return (
            f"Mock search results for '{query}':\n"
            "1. Python is a general-purpose programming language.\n"
            "2. Tools in this runtime are plain Python functions."
        )


class ScrapeUrlCapability(Capability):
    """Fetch a page and return the first words of its readable body text."""

    SKIPPED_TAGS = ("script", "style", "noscript", "template")

    def __init__(self, settings: "Settings", transport: httpx.BaseTransport | None = None):
        """Initialize scraper.

        Args:
            settings: Runtime settings (timeout, word limit)
            transport: Optional httpx transport, used by tests
        """
        self._settings = settings
        self._transport = transport

    @property
    def definition(self) -> CapabilityDefinition:
        return CapabilityDefinition(
            name="scrape_url",
            description="Fetch a URL and extract readable text from the page body",
            input_schema={
                "type": "object",
                "properties": {
                    "url": {"type": "string", "pattern": "^https?://", "description": "Page URL"},
                },
                "required": ["url"],
                "additionalProperties": False,
            },
            timeout_seconds=30,
        )

    def _fetch(self, url: str) -> str:
        try:
            with httpx.Client(
                transport=self._transport,
                timeout=self._settings.network_timeout,
                follow_redirects=True,
                headers={"User-Agent": USER_AGENT},
            ) as client:
                response = client.get(url)
                response.raise_for_status()
                return response.text
        except httpx.TimeoutException as e:
            raise ToolTimeoutError(f"Timed out fetching {url}", tool_name="scrape_url") from e
        except httpx.HTTPStatusError as e:
            raise NetworkError(
                f"HTTP {e.response.status_code} fetching {url}", tool_name="scrape_url"
            ) from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Error fetching {url}: {e}", tool_name="scrape_url") from e

    def extract_text(self, html: str) -> str:
        """Extract body text from an HTML document, truncated to the word limit.

        Raises:
            ParseError: If the document has no body
        """
        soup = BeautifulSoup(html, "html.parser")
        body = soup.body
        if body is None:
            raise ParseError("No body found in document", tool_name="scrape_url")

        for tag in body.find_all(self.SKIPPED_TAGS):
            tag.decompose()

        words = body.get_text(" ").split()
        return " ".join(words[: self._settings.scrape_word_limit])

    def execute(self, **kwargs: Any) -> str:
        """Scrape a URL.

        Raises:
            NetworkError: On transport or HTTP status failures
            ToolTimeoutError: If the request times out
            ParseError: If the response has no document body
        """
        url = kwargs["url"]
        logger.info(f"Scraping URL: {url}")
        return self.extract_text(self._fetch(url))
