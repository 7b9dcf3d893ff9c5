"""Loader for the feed source seed file.

Reads config/sources.yaml, validates it against FeedSourceCatalog and
checks persona identifiers against the known persona taxonomy.
"""

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from caution_feed.config.sources import FeedSourceCatalog, FeedSourceConfig
from caution_feed.core.exceptions import ConfigError, ConfigValidationError
from caution_feed.core.logging import get_logger

logger = get_logger(__name__)


def load_source_configs(
    path: Path | str,
    known_personas: Iterable[str] | None = None,
    min_poll_interval_ms: int | None = None,
) -> list[FeedSourceConfig]:
    """Load and validate feed source definitions.

    Args:
        path: Path to the YAML seed file
        known_personas: Accepted persona identifiers (no check if None)
        min_poll_interval_ms: Deployment poll interval floor, applied on top
            of the model's own minimum

    Returns:
        Validated source configurations in file order

    Raises:
        ConfigError: If the file is missing or not valid YAML
        ConfigValidationError: If an entry fails validation
    """
    path = Path(path)
    content = _load_yaml_file(path)

    try:
        catalog = FeedSourceCatalog.model_validate(content)
    except ValidationError as e:
        logger.error("Source config validation failed", path=str(path), errors=e.error_count())
        raise ConfigValidationError(
            f"Invalid feed source config: {e}", config_path=str(path)
        ) from e

    if known_personas is not None:
        allowed = set(known_personas)
        for source in catalog.sources:
            unknown = [p for p in source.personas if p not in allowed]
            if unknown:
                raise ConfigValidationError(
                    field=f"{source.name}.personas",
                    value=unknown,
                    reason="unknown persona identifiers",
                    config_path=str(path),
                )

    if min_poll_interval_ms is not None:
        for source in catalog.sources:
            if source.poll_interval_ms < min_poll_interval_ms:
                raise ConfigValidationError(
                    field=f"{source.name}.poll_interval_ms",
                    value=source.poll_interval_ms,
                    reason=f"below minimum of {min_poll_interval_ms} ms",
                    config_path=str(path),
                )

    logger.info("Loaded feed source config", path=str(path), sources=len(catalog.sources))
    return catalog.sources


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML mapping from disk.

    Args:
        path: Path to the YAML file

    Returns:
        Parsed YAML content as dictionary

    Raises:
        ConfigError: If file doesn't exist or parsing fails
    """
    if not path.exists():
        logger.error("Config file not found", path=str(path))
        raise ConfigError(f"Config file not found: {path}", config_path=str(path))

    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error("YAML parsing failed", path=str(path), error=str(e))
        raise ConfigError(f"Invalid YAML in {path}: {e}", config_path=str(path)) from e

    if not isinstance(content, dict):
        raise ConfigError(f"Config file must contain a YAML object: {path}", config_path=str(path))
    return content


__all__ = ["load_source_configs"]
