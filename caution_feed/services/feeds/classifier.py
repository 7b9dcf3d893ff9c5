"""Rule-based severity and tag classification.

Severity and tags are derived from substring membership over the
lower-cased "{title} {summary}" text. Severity tiers are checked from
most to least severe and the first tier with a match wins; tags are
independent and any number may apply.

Keyword lists and tier order are the classification contract and are
kept stable.
"""

from pydantic import BaseModel, ConfigDict

from caution_feed.models.caution_item import Severity

SEVERITY_KEYWORDS: tuple[tuple[Severity, tuple[str, ...]], ...] = (
    (
        Severity.CRITICAL,
        ("critical", "zero-day", "urgent", "breach", "ransomware", "exploit"),
    ),
    (
        Severity.HIGH,
        ("vulnerability", "malware", "attack", "threat", "phishing", "hack"),
    ),
    (
        Severity.MEDIUM,
        ("warning", "alert", "risk", "concern", "caution"),
    ),
)

TAG_KEYWORDS: dict[str, tuple[str, ...]] = {
    "password": ("password", "credential"),
    "email": ("email", "phishing"),
    "social-media": ("facebook", "twitter", "instagram", "tiktok", "social media"),
    "mobile": ("mobile", "smartphone", "android", "ios", "iphone"),
    "financial": ("bank", "credit card", "financial", "payment"),
    "children": ("children", "kids", "parental", "teen"),
    "government": ("government", "regulation", "law", "policy"),
}


class Classification(BaseModel):
    """Severity and tags computed for one entry."""

    model_config = ConfigDict(frozen=True)

    severity: Severity
    tags: tuple[str, ...] = ()


def _searchable_text(title: str | None, summary: str | None) -> str:
    return f"{title or ''} {summary or ''}".lower()


def determine_severity(title: str | None, summary: str | None) -> Severity:
    """Determine severity from keywords in title/summary.

    Args:
        title: Entry title
        summary: Entry summary/snippet

    Returns:
        First matching severity tier, or LOW if none match
    """
    text = _searchable_text(title, summary)
    for severity, keywords in SEVERITY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return severity
    return Severity.LOW


def extract_tags(title: str | None, summary: str | None) -> list[str]:
    """Extract topic tags from title/summary.

    Args:
        title: Entry title
        summary: Entry summary/snippet

    Returns:
        Matching tags in TAG_KEYWORDS order
    """
    text = _searchable_text(title, summary)
    return [
        tag for tag, keywords in TAG_KEYWORDS.items() if any(keyword in text for keyword in keywords)
    ]


def classify(title: str | None, summary: str | None) -> Classification:
    """Classify an entry.

    Pure and deterministic: identical input always yields an identical result.

    Args:
        title: Entry title
        summary: Entry summary/snippet

    Returns:
        Classification with severity and tags

    Example:
        >>> classify("Critical zero-day exploit found", "").severity
        <Severity.CRITICAL: 'critical'>
    """
    return Classification(
        severity=determine_severity(title, summary),
        tags=tuple(extract_tags(title, summary)),
    )


__all__ = [
    "Classification",
    "SEVERITY_KEYWORDS",
    "TAG_KEYWORDS",
    "classify",
    "determine_severity",
    "extract_tags",
]
