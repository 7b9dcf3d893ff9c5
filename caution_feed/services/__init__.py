"""Services layer for CautionFeed.

Services implement business logic and orchestrate data operations.
Organized by feature:
- feeds: Feed polling, classification, ingestion, retention and reads
"""
