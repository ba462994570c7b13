"""
Runtime settings for the TV show scraper.

Settings are read from the environment (and a ``.env`` file, loaded by
``common.constants``) exactly once at startup and then passed explicitly to
the components that need them.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from .constants import (
    CATALOG_KIND_TV,
    CATALOG_KINDS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MAX_WORKERS,
    DEFAULT_RETRY_BASE_DELAY,
)


class ConfigError(Exception):
    """Exception for missing or malformed configuration."""

    pass


@dataclass(frozen=True)
class Settings:
    """Resolved configuration for one run."""

    api_key: str
    source: Path
    dest: Path
    language: Optional[str] = None
    include_adult: Optional[str] = None
    proxy: Optional[str] = None
    subgroup_rules: Dict[str, List[str]] = field(default_factory=dict)
    catalog_kind: str = CATALOG_KIND_TV
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_base_delay: float = DEFAULT_RETRY_BASE_DELAY
    max_workers: int = DEFAULT_MAX_WORKERS
    details_retry: bool = True


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    raise ConfigError(f"{name} must be a boolean, got {value!r}")


def _parse_number(name: str, value: str, cast):
    try:
        number = cast(value)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {value!r}")
    if number < 0:
        raise ConfigError(f"{name} must not be negative, got {value!r}")
    return number


def parse_subgroup_rules(raw: Optional[str]) -> Dict[str, List[str]]:
    """
    Parse the SUBGROUP_RULES JSON object.

    Expected shape: ``{"GroupLabel": ["regex1", "regex2"], ...}``.
    """
    if not raw or not raw.strip():
        return {}

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Failed to parse SUBGROUP_RULES JSON: {e}")

    if not isinstance(data, dict):
        raise ConfigError("SUBGROUP_RULES must be a JSON object of label -> list of patterns")

    rules = {}
    for label, patterns in data.items():
        if not isinstance(patterns, list) or not all(isinstance(p, str) for p in patterns):
            raise ConfigError(f"SUBGROUP_RULES entry '{label}' must be a list of strings")
        rules[label] = patterns
    return rules


def load_settings(
        source: Optional[str] = None,
        dest: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Build the run settings from the environment.

    Args:
        source: Source directory override (takes precedence over SOURCE)
        dest: Destination directory override (takes precedence over DEST)
        environ: Environment mapping, defaults to ``os.environ``

    Raises:
        ConfigError: If a required value is missing or a value is malformed
    """
    env = os.environ if environ is None else environ

    api_key = env.get("TMDB_API_KEY")
    if not api_key:
        raise ConfigError("TMDb API key is required. Set TMDB_API_KEY environment variable.")

    source = source or env.get("SOURCE")
    if not source:
        raise ConfigError("Source directory is required. Pass it as an argument or set SOURCE.")

    dest = dest or env.get("DEST")
    if not dest:
        raise ConfigError("Destination directory is required. Pass it as an argument or set DEST.")

    catalog_kind = env.get("CATALOG_KIND", CATALOG_KIND_TV).strip().lower()
    if catalog_kind not in CATALOG_KINDS:
        raise ConfigError(f"CATALOG_KIND must be one of {sorted(CATALOG_KINDS)}, got {catalog_kind!r}")

    max_retries = _parse_number("MAX_RETRIES", env.get("MAX_RETRIES", str(DEFAULT_MAX_RETRIES)), int)
    if max_retries < 1:
        raise ConfigError("MAX_RETRIES must be at least 1")

    return Settings(
        api_key=api_key,
        source=Path(source).expanduser(),
        dest=Path(dest).expanduser(),
        language=env.get("LANGUAGE") or None,
        include_adult=env.get("INCLUDE_ADULT") or None,
        proxy=env.get("PROXY") or None,
        subgroup_rules=parse_subgroup_rules(env.get("SUBGROUP_RULES")),
        catalog_kind=catalog_kind,
        max_retries=max_retries,
        retry_base_delay=_parse_number(
            "RETRY_BASE_DELAY", env.get("RETRY_BASE_DELAY", str(DEFAULT_RETRY_BASE_DELAY)), float
        ),
        max_workers=_parse_number("MAX_WORKERS", env.get("MAX_WORKERS", str(DEFAULT_MAX_WORKERS)), int),
        details_retry=_parse_bool("DETAILS_RETRY", env.get("DETAILS_RETRY", "true")),
    )
