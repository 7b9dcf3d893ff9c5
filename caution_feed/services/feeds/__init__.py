"""Caution feed services.

This package implements the feed ingestion pipeline:
1. Source registry lists sources whose poll interval has elapsed
2. Fetcher downloads and normalizes each source's feed
3. Classifier assigns severity and tags from entry text
4. Ingester stores new entries, skipping already-seen links
5. Scheduler drives poll and retention sweeps
6. Read store serves the persona feed and statistics
"""

from caution_feed.services.feeds.base import (
    CautionItemView,
    CautionPage,
    FeedSourceInfo,
    IngestResult,
    PersonaStats,
    RawEntry,
    SourceRef,
    SourceRunResult,
    SourceRunStatus,
    SweepReport,
)
from caution_feed.services.feeds.classifier import Classification, classify
from caution_feed.services.feeds.fetcher import FeedFetcher
from caution_feed.services.feeds.ingester import DeduplicatingIngester
from caution_feed.services.feeds.read_store import FeedReadStore
from caution_feed.services.feeds.registry import SourceRegistry
from caution_feed.services.feeds.retention import RetentionSweeper
from caution_feed.services.feeds.scheduler import FeedScheduler, SourceState

__all__ = [
    # DTOs
    "FeedSourceInfo",
    "RawEntry",
    "IngestResult",
    "SourceRunStatus",
    "SourceRunResult",
    "SweepReport",
    "SourceRef",
    "CautionItemView",
    "CautionPage",
    "PersonaStats",
    # Classifier
    "Classification",
    "classify",
    # Services
    "SourceRegistry",
    "FeedFetcher",
    "DeduplicatingIngester",
    "RetentionSweeper",
    "FeedReadStore",
    "FeedScheduler",
    "SourceState",
]
