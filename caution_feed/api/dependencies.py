"""FastAPI dependencies resolved from the DI container."""

from caution_feed.core.config import Config, get_config
from caution_feed.core.container import get_container
from caution_feed.services.feeds.read_store import FeedReadStore
from caution_feed.services.feeds.scheduler import FeedScheduler


def get_settings() -> Config:
    """Application settings."""
    return get_config()


def get_read_store() -> FeedReadStore:
    """Feed read store for the request."""
    return get_container().read_store()


def get_feed_scheduler() -> FeedScheduler:
    """Process-wide feed scheduler."""
    return get_container().feed_scheduler()


__all__ = ["get_feed_scheduler", "get_read_store", "get_settings"]
