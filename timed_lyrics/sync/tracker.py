from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from timed_lyrics.model.lines import TimedLine

# A line is active on [start, end): a shared boundary belongs to the later line,
# and a zero-length line (start == end) is never active.


def _is_active(line: TimedLine, now_ms: int) -> bool:
    return line.start <= now_ms < line.end


def first_highlight_index(lines: Sequence[TimedLine], now_ms: int) -> int:
    """
    Index of the first line active at `now_ms`.

    If no line is active, returns the index of the first line starting after
    `now_ms` (len(lines) once playback is past every line). Empty -> 0.
    """
    if not lines:
        return 0

    low, high = 0, len(lines) - 1
    result = len(lines)
    while low <= high:
        mid = (low + high) // 2
        line = lines[mid]
        if line.start > now_ms:
            result = mid
            high = mid - 1
        elif line.end <= now_ms:
            low = mid + 1
        else:
            result = mid
            high = mid - 1

    if result < len(lines) and _is_active(lines[result], now_ms):
        return result
    return min(low, len(lines))


def all_highlight_indices(lines: Sequence[TimedLine], now_ms: int) -> list[int]:
    """
    Indices of every line active at `now_ms`, ascending.

    Binary search lands on any active line, then the scan widens in both
    directions until a boundary condition stops it: O(log n + k).
    """
    if not lines:
        return []

    low, high = 0, len(lines) - 1
    probe = -1
    while low <= high:
        mid = (low + high) // 2
        line = lines[mid]
        if line.start > now_ms:
            high = mid - 1
        elif line.end <= now_ms:
            low = mid + 1
        else:
            probe = mid
            break

    origin = probe if probe >= 0 else max(low - 1, 0)
    out: list[int] = []

    for i in range(origin, -1, -1):
        line = lines[i]
        if _is_active(line, now_ms):
            out.append(i)
        if line.end <= now_ms:
            break

    for i in range(origin + 1, len(lines)):
        line = lines[i]
        if _is_active(line, now_ms):
            out.append(i)
        if line.start > now_ms:
            break

    out.sort()
    return out


@dataclass(slots=True)
class HighlightTracker:
    """
    Reports the active line set only when it changes: O(log n + k) per tick.
    Seeking backwards just yields a different set.
    """

    lines: Sequence[TimedLine]
    last_indices: tuple[int, ...] | None = field(default=None)

    @classmethod
    def from_document(cls, doc) -> "HighlightTracker":
        return cls(lines=doc.lines)

    def current_indices(self, now_ms: int) -> tuple[int, ...]:
        return tuple(all_highlight_indices(self.lines, now_ms))

    def changed_indices(self, now_ms: int) -> tuple[int, ...] | None:
        idx = self.current_indices(now_ms)
        if idx != self.last_indices:
            self.last_indices = idx
            return idx
        return None

    def reset(self) -> None:
        self.last_indices = None
