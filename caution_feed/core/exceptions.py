"""Custom exceptions for the CautionFeed application.

This module defines all custom exceptions used throughout the application.
All exceptions inherit from CautionFeedError for easy catching.

Exception classes include context dictionaries for structured logging
and debugging. Use the `context` property to access additional details.
"""

from typing import Any


class CautionFeedError(Exception):
    """Base exception for all CautionFeed errors.

    All custom exceptions in the application should inherit from this class.
    Provides a context dictionary for structured error information.

    Attributes:
        context: Dictionary with additional error context

    Example:
        >>> try:
        ...     raise CautionFeedError("Something went wrong", context={"source": "ftc"})
        ... except CautionFeedError as e:
        ...     print(f"Error: {e}, Context: {e.context}")
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Initialize CautionFeedError.

        Args:
            message: Error message
            context: Optional dictionary with additional context
        """
        self.context = context or {}
        super().__init__(message)

    def with_context(self, **kwargs: Any) -> "CautionFeedError":
        """Add additional context to the exception.

        Args:
            **kwargs: Key-value pairs to add to context

        Returns:
            Self for method chaining
        """
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization.

        Returns:
            Dictionary with error type, message, and context
        """
        return {
            "error_type": self.__class__.__name__,
            "message": str(self),
            "context": self.context,
        }


# ============================================
# Database Errors
# ============================================


class DatabaseError(CautionFeedError):
    """Base exception for database-related errors."""

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        operation: str | None = None,
    ) -> None:
        """Initialize DatabaseError.

        Args:
            message: Error message
            context: Additional context
            operation: Database operation that failed (e.g., "insert", "update")
        """
        ctx = context or {}
        if operation:
            ctx["operation"] = operation
        super().__init__(message, context=ctx)


class StoreUnavailableError(DatabaseError):
    """Raised when the registry or read store cannot be reached at all."""


class RecordNotFoundError(DatabaseError):
    """Raised when a database record is not found.

    Attributes:
        model: The model class that was queried
        record_id: The ID that was not found
    """

    def __init__(
        self,
        model: str,
        record_id: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize RecordNotFoundError.

        Args:
            model: Name of the model class
            record_id: ID that was not found
            context: Additional context
        """
        ctx = context or {}
        ctx.update({"model": model, "record_id": record_id})
        super().__init__(f"{model} with id={record_id} not found", context=ctx)
        self.model = model
        self.record_id = record_id


class ItemPersistError(DatabaseError):
    """Raised when a single caution item cannot be written.

    Attributes:
        link: External link of the entry that failed
        cause: Underlying exception
    """

    def __init__(
        self,
        link: str,
        cause: BaseException,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ItemPersistError.

        Args:
            link: External link of the failed entry
            cause: Underlying exception
            context: Additional context
        """
        ctx = context or {}
        ctx.update({"link": link, "cause": str(cause)})
        super().__init__(f"Failed to persist caution item {link}: {cause}", context=ctx)
        self.link = link
        self.cause = cause


# ============================================
# Configuration Errors
# ============================================


class ConfigError(CautionFeedError):
    """Base exception for configuration-related errors."""

    def __init__(
        self,
        message: str,
        config_path: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ConfigError.

        Args:
            message: Error message
            config_path: Path to the config file/key
            context: Additional context
        """
        ctx = context or {}
        if config_path:
            ctx["config_path"] = config_path
        super().__init__(message, context=ctx)


class ConfigValidationError(ConfigError):
    """Raised when configuration validation fails.

    Supports two usage patterns:
    1. Simple: ConfigValidationError("error message")
    2. Structured: ConfigValidationError(field="url", value="x", reason="duplicate")

    Attributes:
        field: Field that failed validation (optional)
        value: Invalid value (optional)
        reason: Validation failure reason (optional)
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        field: str | None = None,
        value: Any = None,
        reason: str | None = None,
        config_path: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ConfigValidationError.

        Args:
            message: Error message (for simple usage)
            field: Field that failed validation
            value: Invalid value
            reason: Validation failure reason
            config_path: Path to config file
            context: Additional context
        """
        ctx = context or {}

        self.field = field
        self.value = value
        self.reason = reason

        if field and reason:
            ctx.update({"field": field, "reason": reason})
            if value is not None:
                ctx["value"] = str(value)
            final_message = f"Config validation failed for '{field}': {reason}"
        elif message:
            final_message = message
        else:
            final_message = "Configuration validation failed"

        super().__init__(final_message, config_path=config_path, context=ctx)


# ============================================
# Feed Errors
# ============================================


class FetchError(CautionFeedError):
    """Base exception for failures retrieving or parsing a feed source.

    Attributes:
        source: Name of the source that failed
        url: Feed URL
        cause: Underlying exception (if any)
    """

    def __init__(
        self,
        source: str,
        url: str,
        message: str,
        cause: BaseException | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize FetchError.

        Args:
            source: Source name
            url: Feed URL
            message: Error message
            cause: Underlying exception
            context: Additional context
        """
        ctx = context or {}
        ctx.update({"source": source, "url": url})
        if cause is not None:
            ctx["cause"] = f"{type(cause).__name__}: {cause}"
        super().__init__(f"{source}: {message}", context=ctx)
        self.source = source
        self.url = url
        self.cause = cause


class SourceUnreachableError(FetchError):
    """Raised on network failures, HTTP error statuses and timeouts."""


class SourceMalformedError(FetchError):
    """Raised when a feed document cannot be parsed."""


class RetentionSweepError(CautionFeedError):
    """Raised when purging stale caution items fails.

    Attributes:
        retention_days: Horizon the sweep was run with
    """

    def __init__(
        self,
        message: str,
        retention_days: int,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize RetentionSweepError.

        Args:
            message: Error message
            retention_days: Horizon the sweep was run with
            context: Additional context
        """
        ctx = context or {}
        ctx["retention_days"] = retention_days
        super().__init__(message, context=ctx)
        self.retention_days = retention_days


__all__ = [
    "CautionFeedError",
    "DatabaseError",
    "StoreUnavailableError",
    "RecordNotFoundError",
    "ItemPersistError",
    "ConfigError",
    "ConfigValidationError",
    "FetchError",
    "SourceUnreachableError",
    "SourceMalformedError",
    "RetentionSweepError",
]
