"""Celery workers for CautionFeed.

This package contains Celery tasks and configuration for running the
feed sweeps outside the API process.

Modules:
- celery_app: Celery application configuration and beat schedule
- feeds: Poll and retention sweep tasks
"""

from caution_feed.workers.celery_app import celery_app

__all__ = ["celery_app"]
