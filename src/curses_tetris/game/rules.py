from __future__ import annotations

from dataclasses import dataclass


@dataclass
class GravityRules:
    base_interval_ms: int = 600
    ms_per_line: int = 2
    min_interval_ms: int = 50

    def interval_for_lines(self, lines: int) -> int:
        """Milliseconds between automatic one-row descents after ``lines`` clears."""
        interval = self.base_interval_ms - self.ms_per_line * max(0, lines)
        return max(self.min_interval_ms, interval)
