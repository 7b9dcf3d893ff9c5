"""Typed configuration models for the feed pipeline."""

from caution_feed.config.scheduling import RetentionConfig, SchedulerConfig
from caution_feed.config.sources import FeedSourceCatalog, FeedSourceConfig

__all__ = [
    "FeedSourceCatalog",
    "FeedSourceConfig",
    "RetentionConfig",
    "SchedulerConfig",
]
