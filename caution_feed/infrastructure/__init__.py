"""Infrastructure layer components.

This module provides infrastructure components shared by services,
such as the pooled HTTP client used for feed fetches.
"""

from caution_feed.infrastructure.http_client import HTTPClient

__all__ = ["HTTPClient"]
