from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any, Mapping, Tuple

from .errors import ConfigError


logger = logging.getLogger(__name__)


@dataclass
class ScoringRules:
    # index = rows cleared in a single landing
    line_clear_scores: Tuple[int, ...] = (0, 100, 300, 500, 800)
    lines_per_level: int = 10
    # drop interval in ms for level 1, 2, ...; the last entry is the floor
    speed_table_ms: Tuple[int, ...] = (800, 720, 640, 560, 480, 400, 320, 240, 160, 100)

    def __post_init__(self) -> None:
        self.line_clear_scores = tuple(int(v) for v in self.line_clear_scores)
        self.speed_table_ms = tuple(int(v) for v in self.speed_table_ms)
        if len(self.line_clear_scores) < 2 or self.line_clear_scores[0] != 0:
            raise ConfigError("line_clear_scores must start with 0 and award at least one line")
        if self.lines_per_level <= 0:
            raise ConfigError("lines_per_level must be positive")
        if not self.speed_table_ms or any(v <= 0 for v in self.speed_table_ms):
            raise ConfigError("speed_table_ms must hold positive intervals")
        if any(a < b for a, b in zip(self.speed_table_ms, self.speed_table_ms[1:])):
            raise ConfigError("speed_table_ms must be non-increasing")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScoringRules":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"unknown scoring rule(s): {', '.join(sorted(unknown))}")
        return cls(**dict(data))

    def score_for_lines(self, lines: int) -> int:
        if lines <= 0:
            return 0
        if lines < len(self.line_clear_scores):
            return self.line_clear_scores[lines]
        return self.line_clear_scores[-1]

    def level_for_lines(self, lines_total: int) -> int:
        return lines_total // self.lines_per_level + 1

    def interval_for_level(self, level: int) -> int:
        index = min(max(level, 1) - 1, len(self.speed_table_ms) - 1)
        return self.speed_table_ms[index]


@dataclass
class ClearResult:
    lines_cleared: int
    score_gained: int
    level_changed: bool


class ScoreTracker:
    """Cumulative score, cleared lines and level for one game."""

    def __init__(self, rules: ScoringRules) -> None:
        self.rules = rules
        self.reset()

    def reset(self) -> None:
        self.score = 0
        self.lines_total = 0
        self.level = 1
        self.drop_interval_ms = self.rules.interval_for_level(self.level)

    def apply_clear(self, lines: int) -> ClearResult:
        if lines <= 0:
            return ClearResult(0, 0, False)
        gained = self.rules.score_for_lines(lines)
        self.score += gained
        self.lines_total += lines
        new_level = self.rules.level_for_lines(self.lines_total)
        level_changed = new_level > self.level
        if level_changed:
            self.level = new_level
            self.drop_interval_ms = self.rules.interval_for_level(new_level)
            logger.debug("level up to %d, drop interval %d ms", self.level, self.drop_interval_ms)
        return ClearResult(lines, gained, level_changed)
