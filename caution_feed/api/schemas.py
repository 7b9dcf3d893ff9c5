"""Request and response models for the caution feed API."""

from datetime import datetime

from pydantic import BaseModel, Field

from caution_feed.services.feeds.base import (
    CautionItemView,
    PersonaStats,
    SourceRunResult,
    SweepReport,
)


class CautionListResponse(BaseModel):
    """One page of a persona's caution feed."""

    items: list[CautionItemView] = Field(..., description="Items on this page, newest first")
    total: int = Field(..., description="Items matching the filters")
    page: int = Field(..., description="1-based page number")
    limit: int = Field(..., description="Page size")
    pages: int = Field(..., description="Total number of pages")


class CategoriesResponse(BaseModel):
    """Known categories and those carried by active items."""

    categories: list[str] = Field(..., description="All known categories")
    in_use: list[str] = Field(default_factory=list, description="Categories of active items")


class PersonaStatsResponse(PersonaStats):
    """Dashboard statistics for one persona."""

    persona_id: str


class RefreshResponse(BaseModel):
    """Summary of a forced poll sweep."""

    success: bool
    message: str
    started_at: datetime
    completed_at: datetime | None = None
    new_count: int = 0
    failed_count: int = 0
    results: list[SourceRunResult] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: SweepReport) -> "RefreshResponse":
        """Build the response from a sweep report."""
        if report.skipped:
            message = f"Refresh skipped: {report.error}"
        else:
            message = (
                f"Polled {len(report.results)} sources, "
                f"{report.new_count} new items, {len(report.failed)} failed"
            )
        return cls(
            success=not report.skipped,
            message=message,
            started_at=report.started_at,
            completed_at=report.completed_at,
            new_count=report.new_count,
            failed_count=len(report.failed),
            results=report.results,
        )


class ErrorResponse(BaseModel):
    """Error payload returned for handled application errors."""

    error_type: str
    message: str
    context: dict = Field(default_factory=dict)


__all__ = [
    "CautionListResponse",
    "CategoriesResponse",
    "PersonaStatsResponse",
    "RefreshResponse",
    "ErrorResponse",
]
