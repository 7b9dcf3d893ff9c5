"""Celery application configuration.

This module configures the Celery application that drives the feed
sweeps when the in-process scheduler is disabled (multi-process
deployments). Uses Redis as both broker and result backend.
"""

from datetime import timedelta

from celery import Celery

from caution_feed.core.config import get_config

_config = get_config()

# Create Celery app
celery_app = Celery(
    "caution_feed",
    broker=str(_config.celery_broker_url),
    backend=str(_config.celery_result_backend),
    include=["caution_feed.workers.feeds"],
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=600,  # 10 minutes hard limit
    task_soft_time_limit=540,  # 9 minutes soft limit
    # Worker settings
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=100,
    # Result settings
    result_expires=86400,  # 24 hours
    # Beat scheduler settings
    beat_scheduler="celery.beat:PersistentScheduler",
    beat_schedule_filename="celerybeat-schedule",
    beat_schedule={
        "poll-feed-sources": {
            "task": "caution_feed.workers.feeds.poll_feed_sources",
            "schedule": timedelta(seconds=_config.feed_poll_sweep_seconds),
            "options": {"expires": _config.feed_poll_sweep_seconds},
        },
        "purge-stale-cautions": {
            "task": "caution_feed.workers.feeds.purge_stale_cautions",
            "schedule": timedelta(hours=_config.feed_retention_sweep_hours),
        },
    },
    # Sweeps run on their own queue: celery -A caution_feed.workers worker -Q feeds
    task_routes={
        "caution_feed.workers.feeds.*": {"queue": "feeds"},
    },
    task_default_queue="default",
)

__all__ = ["celery_app"]
