"""Scheduler and retention configuration models."""

from pydantic import BaseModel, Field

from caution_feed.core.config import Config


class SchedulerConfig(BaseModel):
    """Feed scheduler configuration.

    Attributes:
        poll_sweep_seconds: Seconds between due-source poll sweeps
        retention_sweep_hours: Hours between retention sweeps
        tick_seconds: Sleep between scheduler loop iterations
        max_concurrent_sources: Sources fetched concurrently per sweep
    """

    poll_sweep_seconds: int = Field(default=300, ge=10)
    retention_sweep_hours: int = Field(default=24, ge=1)
    tick_seconds: float = Field(default=60.0, gt=0)
    max_concurrent_sources: int = Field(default=4, ge=1, le=64)

    @classmethod
    def from_settings(cls, config: Config) -> "SchedulerConfig":
        """Build from application settings."""
        return cls(
            poll_sweep_seconds=config.feed_poll_sweep_seconds,
            retention_sweep_hours=config.feed_retention_sweep_hours,
            tick_seconds=config.scheduler_tick_seconds,
            max_concurrent_sources=config.feed_max_concurrent_sources,
        )


class RetentionConfig(BaseModel):
    """Retention sweep configuration.

    Attributes:
        retention_days: Items published earlier than now - retention_days are deleted
    """

    retention_days: int = Field(default=90, ge=1)

    @classmethod
    def from_settings(cls, config: Config) -> "RetentionConfig":
        """Build from application settings."""
        return cls(retention_days=config.feed_retention_days)


__all__ = [
    "SchedulerConfig",
    "RetentionConfig",
]
