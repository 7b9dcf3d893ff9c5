"""Common type definitions for the application.

This module provides shared type aliases used across multiple modules
to avoid duplication and ensure consistency.
"""

from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

# Type alias for async session factory functions
# Used by services that need to create database sessions
SessionFactory = Callable[[], AsyncSession]

# Returns the current time as a timezone-aware UTC datetime
Clock = Callable[[], datetime]

# Async sleep primitive (asyncio.sleep compatible)
Sleeper = Callable[[float], Awaitable[None]]


def utc_now() -> datetime:
    """Default clock: current UTC time."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Return value as an aware UTC datetime.

    Naive datetimes are assumed to already be in UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


__all__ = [
    "SessionFactory",
    "Clock",
    "Sleeper",
    "utc_now",
    "ensure_utc",
]
