"""
Match page scraping for FC Kairat ticket sales.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional
from urllib.parse import urljoin

import httpx

from .dom import HtmlDocument, Node
from .exceptions import EventNotFoundError, ExtractionError, FetchError
from .models import (
    TRACKED_EVENTS,
    AvailabilityStatus,
    ScraperConfig,
    Snapshot,
    TrackedEvent,
)

logger = logging.getLogger(__name__)

MATCH_BLOCK_SELECTOR = ".match-block"
TEAM_NAME_SELECTOR = ".match-block__name"
TICKET_BUTTON_SELECTOR = "a.match-block__tickets.skew.simple-filled-btn"
DISABLED_CLASS = "disabled"


def parse_snapshot(html: str, base_url: str) -> Snapshot:
    """Extract the availability of every tracked match from the page HTML.

    Args:
        html: Body of the match page.
        base_url: URL the page was fetched from, used to resolve ticket links.

    Returns:
        Snapshot with a status for every tracked match.

    Raises:
        ExtractionError: No match blocks on the page.
        EventNotFoundError: A tracked match is missing from every block.
    """
    document = HtmlDocument(html)
    blocks = document.find_all(MATCH_BLOCK_SELECTOR)
    logger.debug(f"Found {len(blocks)} match blocks")

    if not blocks:
        raise ExtractionError("No match blocks found on the page")

    statuses: Dict[str, AvailabilityStatus] = {}
    for event in TRACKED_EVENTS:
        status = _find_event_status(document, blocks, event, base_url)
        if status is None:
            raise EventNotFoundError(event)
        statuses[event.key] = status

    return Snapshot(statuses)


def _find_event_status(
    document: HtmlDocument,
    blocks: list,
    event: TrackedEvent,
    base_url: str,
) -> Optional[AvailabilityStatus]:
    for block in blocks:
        if not _block_has_opponent(document, block, event.opponent):
            continue

        button = document.find(block, TICKET_BUTTON_SELECTOR)
        if button is None:
            logger.warning(f"No ticket button found for {event.opponent}")
            continue

        is_available = not document.has_class(button, DISABLED_CLASS)
        href = document.attr(button, "href")
        link = urljoin(base_url, href) if href else ""

        logger.debug(f"Match vs {event.opponent}: enabled={is_available}, href={link}")
        return AvailabilityStatus(is_available=is_available, link=link)

    return None


def _block_has_opponent(document: HtmlDocument, block: Node, opponent: str) -> bool:
    return any(
        document.text(name) == opponent
        for name in document.find_all_in(block, TEAM_NAME_SELECTOR)
    )


async def fetch_with_retry(
    fetch: Callable[[], Awaitable[Snapshot]],
    delay: float,
) -> Snapshot:
    """Run ``fetch``, retrying exactly once after ``delay`` seconds.

    The second failure is raised unchanged.
    """
    try:
        return await fetch()
    except Exception as e:
        logger.warning(f"First attempt failed ({e}), retrying in {delay}s...")
        await asyncio.sleep(delay)
        return await fetch()


class PageScraper:
    """Fetches the match page and reports ticket availability."""

    def __init__(self, config: ScraperConfig, client: Optional[httpx.AsyncClient] = None):
        """Initialize with scraper configuration.

        Args:
            config: Scraper settings.
            client: Shared HTTP client. When omitted a client is created per fetch.
        """
        self.config = config
        self.client = client

    @property
    def headers(self) -> Dict[str, str]:
        return {"User-Agent": self.config.user_agent}

    async def fetch(self) -> Snapshot:
        """Fetch the page once and parse it into a Snapshot."""
        html = await self._get_page()
        snapshot = parse_snapshot(html, self.config.page_url)
        logger.info(f"Parse result: {snapshot}")
        return snapshot

    async def fetch_with_retry(self) -> Snapshot:
        """Fetch the page, retrying once on failure."""
        return await fetch_with_retry(self.fetch, self.config.retry_delay)

    async def _get_page(self) -> str:
        logger.info(f"🌐 Fetching page: {self.config.page_url}")
        try:
            if self.client is not None:
                response = await self._request(self.client)
            else:
                async with httpx.AsyncClient() as client:
                    response = await self._request(client)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            message = f"HTTP error: {e} (Status: {e.response.status_code})"
            logger.error(message)
            raise FetchError(message, status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            message = f"HTTP error: {str(e) or type(e).__name__}"
            logger.error(message)
            raise FetchError(message) from e

        return response.text

    async def _request(self, client: httpx.AsyncClient) -> httpx.Response:
        return await client.get(
            self.config.page_url,
            headers=self.headers,
            timeout=self.config.timeout,
            follow_redirects=True,
        )
