"""RSS/Atom feed fetcher.

Retrieves a source's feed document and normalizes it into RawEntry
objects. Uses feedparser for parsing various feed formats. Network and
parsing failures are reported as FetchError subclasses so the caller can
skip the source for this cycle.
"""

import asyncio
import html
import re
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Any

import feedparser
import httpx

from caution_feed.core.exceptions import SourceMalformedError, SourceUnreachableError
from caution_feed.core.logging import get_logger
from caution_feed.infrastructure.http_client import HTTPClient
from caution_feed.services.feeds.base import FeedSourceInfo, RawEntry

logger = get_logger(__name__)

_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")


class FeedFetcher:
    """Fetches and parses feed sources.

    Every fetch is bounded by `timeout`, covering connect, transfer and
    redirects, so one slow source cannot stall a sweep.

    Attributes:
        http_client: Shared HTTP client
        timeout: Per-fetch timeout in seconds
    """

    def __init__(self, http_client: HTTPClient, timeout: float = 10.0) -> None:
        """Initialize feed fetcher.

        Args:
            http_client: Shared HTTP client
            timeout: Per-fetch timeout in seconds
        """
        self.http_client = http_client
        self.timeout = timeout

    async def fetch(self, source: FeedSourceInfo) -> list[RawEntry]:
        """Fetch a source and return its entries in feed order.

        Args:
            source: Source snapshot

        Returns:
            Normalized entries

        Raises:
            SourceUnreachableError: On network error, HTTP error status or timeout
            SourceMalformedError: If the document cannot be parsed as a feed
        """
        logger.info("Fetching feed", source_id=str(source.id), source_name=source.name)

        try:
            async with asyncio.timeout(self.timeout):
                response = await self.http_client.get(source.url, timeout=self.timeout)
                response.raise_for_status()
                body = response.content
        except (TimeoutError, httpx.TimeoutException) as e:
            raise SourceUnreachableError(
                source.name, source.url, f"timed out after {self.timeout}s", cause=e
            ) from e
        except httpx.HTTPStatusError as e:
            raise SourceUnreachableError(
                source.name, source.url, f"HTTP {e.response.status_code}", cause=e
            ) from e
        except httpx.HTTPError as e:
            raise SourceUnreachableError(source.name, source.url, "request failed", cause=e) from e

        entries = self.parse(source, body)
        logger.info(
            "Feed fetched",
            source_id=str(source.id),
            source_name=source.name,
            entries=len(entries),
        )
        return entries

    def parse(self, source: FeedSourceInfo, body: bytes | str) -> list[RawEntry]:
        """Parse a feed document into entries.

        Args:
            source: Source the document came from
            body: Raw document

        Returns:
            Normalized entries

        Raises:
            SourceMalformedError: If the document is not a usable feed
        """
        feed = feedparser.parse(body)

        if feed.bozo:
            if not feed.entries:
                raise SourceMalformedError(
                    source.name,
                    source.url,
                    "unparseable feed document",
                    cause=feed.get("bozo_exception"),
                )
            logger.warning(
                "Feed parsing had issues",
                source_name=source.name,
                error=str(feed.get("bozo_exception")),
            )

        entries: list[RawEntry] = []
        for entry in feed.entries:
            raw = self._to_raw_entry(entry, source)
            if raw is not None:
                entries.append(raw)
        return entries

    def _to_raw_entry(self, entry: Any, source: FeedSourceInfo) -> RawEntry | None:
        """Convert feedparser entry to RawEntry.

        Args:
            entry: feedparser entry object
            source: Source the entry belongs to

        Returns:
            RawEntry or None if the entry has no link or title
        """
        link = (entry.get("link") or entry.get("id") or "").strip()
        if not link:
            logger.warning(
                "Feed entry has no link",
                source_name=source.name,
                title=(entry.get("title") or "")[:50],
            )
            return None

        title = strip_html(entry.get("title") or "")
        if not title:
            logger.warning("Feed entry has no title", source_name=source.name, link=link)
            return None

        content = None
        if entry.get("content"):
            # Atom and content:encoded come through as a list
            content = entry.content[0].get("value") or None

        summary = strip_html(entry.get("summary") or entry.get("description") or "")
        if not summary and content:
            summary = strip_html(content)

        return RawEntry(
            title=title,
            summary=summary,
            content=content,
            link=link,
            published_at=parse_entry_date(entry),
        )


def parse_entry_date(entry: Any) -> datetime | None:
    """Parse the publish date of a feed entry.

    Args:
        entry: feedparser entry

    Returns:
        Aware UTC datetime or None if no date could be parsed
    """
    for field in ("published_parsed", "updated_parsed", "created_parsed"):
        parsed = entry.get(field)
        if parsed:
            try:
                # feedparser normalizes struct_time to UTC
                return datetime(*parsed[:6], tzinfo=UTC)
            except (TypeError, ValueError):
                continue

    for field in ("published", "updated", "created"):
        date_str = entry.get(field)
        if date_str:
            try:
                parsed_dt = parsedate_to_datetime(date_str)
            except (TypeError, ValueError):
                continue
            if parsed_dt.tzinfo is None:
                return parsed_dt.replace(tzinfo=UTC)
            return parsed_dt.astimezone(UTC)

    return None


def strip_html(text: str) -> str:
    """Remove HTML tags, decode entities and collapse whitespace.

    Args:
        text: Text with potential HTML

    Returns:
        Plain text
    """
    clean = _TAG_RE.sub("", text)
    clean = html.unescape(clean)
    return _WS_RE.sub(" ", clean).strip()


__all__ = [
    "FeedFetcher",
    "parse_entry_date",
    "strip_html",
]
