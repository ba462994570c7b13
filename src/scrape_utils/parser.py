"""
Filename parser for extracting season and episode numbers.

Release groups name their files in their own ways, so the parser first tries
the patterns registered for any group whose label appears in the file name
and only then falls back to generic ``S01E02`` / bare number detection.
"""

import logging
import re
from pathlib import PurePath
from typing import Dict, List, Mapping, Optional, Pattern, Sequence, Tuple

from common.constants import (
    BARE_EPISODE_REGEX,
    DEFAULT_SEASON,
    DEFAULT_SUBGROUP_RULES,
    SEASON_EPISODE_REGEX,
)
from common.settings import ConfigError

from .models import EpisodeInfo

logger = logging.getLogger(__name__)


class RuleSet:
    """Ordered, immutable mapping of group label -> compiled patterns."""

    def __init__(self, groups: Sequence[Tuple[str, Sequence[Pattern]]]):
        self._groups: Tuple[Tuple[str, Tuple[Pattern, ...]], ...] = tuple(
            (label, tuple(patterns)) for label, patterns in groups
        )

    @property
    def labels(self) -> List[str]:
        return [label for label, _ in self._groups]

    def groups_for(self, filename: str):
        """Yield (label, patterns) for every group whose label occurs in filename."""
        for label, patterns in self._groups:
            if label in filename:
                yield label, patterns

    def __len__(self) -> int:
        return len(self._groups)


def build_rule_set(
        external_rules: Optional[Mapping[str, List[str]]] = None,
        defaults: Mapping[str, List[str]] = DEFAULT_SUBGROUP_RULES,
) -> RuleSet:
    """
    Merge external rules over the defaults and compile them.

    A label present in both keeps its default position but takes the
    external patterns. New labels follow in the order given.

    Raises:
        ConfigError: If a pattern is not a valid regular expression
    """
    merged: Dict[str, List[str]] = dict(defaults)
    for label, patterns in (external_rules or {}).items():
        merged[label] = list(patterns)

    groups = []
    for label, patterns in merged.items():
        compiled = []
        for pattern in patterns:
            try:
                compiled.append(re.compile(pattern))
            except re.error as e:
                raise ConfigError(f"Invalid pattern for group '{label}': {pattern!r} ({e})")
        groups.append((label, compiled))

    logger.debug(f"Loaded filename rules for groups: {', '.join(merged) or '(none)'}")
    return RuleSet(groups)


### Internal helper functions ###
def _pad(value: str) -> str:
    return value.zfill(2)


def _from_captures(captures: Sequence[Optional[str]]) -> Optional[EpisodeInfo]:
    """Turn regex captures into an EpisodeInfo, or None if they don't fit."""
    if not captures or not all(c is not None and c.isdigit() for c in captures):
        return None
    if len(captures) >= 2:
        return EpisodeInfo(_pad(captures[0]), _pad(captures[1]))
    return EpisodeInfo(DEFAULT_SEASON, _pad(captures[0]))


def _match_groups(filename: str, rule_set: RuleSet) -> Optional[EpisodeInfo]:
    for label, patterns in rule_set.groups_for(filename):
        for pattern in patterns:
            match = pattern.search(filename)
            if not match:
                continue
            result = _from_captures(match.groups()[:2])
            if result:
                logger.debug(f"'{filename}' matched rule {pattern.pattern!r} of group '{label}'")
                return result
    return None


def _match_generic(filename: str) -> Optional[EpisodeInfo]:
    match = SEASON_EPISODE_REGEX.search(filename)
    if match:
        return EpisodeInfo(_pad(match.group(1)), _pad(match.group(2)))

    # The extension is dropped so "mp4" never reads as episode 4
    match = BARE_EPISODE_REGEX.search(PurePath(filename).stem)
    if match:
        return EpisodeInfo(DEFAULT_SEASON, _pad(match.group(1)))
    return None


### Public functions ###
def parse_episode(filename: str, rule_set: RuleSet) -> Optional[EpisodeInfo]:
    """
    Extract season and episode numbers from a file name.

    Examples:
        "show_S01E02.mp4" -> ("01", "02")
        "[LoliSub] - 07 [1080p].mkv" -> ("01", "07")
        "random.mkv" -> None

    Returns:
        EpisodeInfo, or None when nothing matched (the file should be skipped)
    """
    return _match_groups(filename, rule_set) or _match_generic(filename)
