"""Normalize raw per-minute statistic arrays into fixed [home, away] pairs."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from ..utils.odds import parse_int

Pair = Tuple[int, int]

STAT_KEYS = (
    "attacks",
    "dangerous_attacks",
    "on_target",
    "off_target",
    "corners",
    "yellowcards",
    "redcards",
)


@dataclass(frozen=True)
class ProcessedStats:
    """Seven (home, away) integer pairs for one moment of a match."""

    attacks: Pair = (0, 0)
    dangerous_attacks: Pair = (0, 0)
    on_target: Pair = (0, 0)
    off_target: Pair = (0, 0)
    corners: Pair = (0, 0)
    yellowcards: Pair = (0, 0)
    redcards: Pair = (0, 0)

    def to_dict(self) -> Dict[str, list]:
        return {k: list(v) for k, v in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProcessedStats":
        """Inverse of to_dict(); tolerant of the same malformed input as parse_stats()."""
        return parse_stats(data)


def _parse_pair(value: Any) -> Pair:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return 0, 0
    return parse_int(value[0]), parse_int(value[1])


def parse_stats(stats: Optional[Mapping[str, Any]]) -> ProcessedStats:
    """Build a ProcessedStats from the feed's ``stats`` mapping.

    Any key that is missing, or whose value is not a two-element array, becomes (0, 0).
    """
    if not isinstance(stats, Mapping):
        return ProcessedStats()
    return ProcessedStats(**{key: _parse_pair(stats.get(key)) for key in STAT_KEYS})
