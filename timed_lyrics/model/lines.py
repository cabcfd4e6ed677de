from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# End of the last line in line-timed formats, where nothing follows to close it.
UNBOUNDED_END = 2**31 - 1

# Accompaniment lines stay focused a little before and after their own bounds.
ACCOMPANIMENT_FOCUS_WINDOW_MS = 800


class Alignment(Enum):
    START = "start"
    END = "end"
    UNSPECIFIED = "unspecified"


@dataclass(frozen=True, slots=True)
class Artist:
    type: str
    name: str


@dataclass(frozen=True, slots=True)
class Syllable:
    content: str
    start: int
    end: int
    phonetic: str | None = None

    @property
    def duration(self) -> int:
        return self.end - self.start


def _check_bounds(start: int, end: int) -> None:
    if end < start:
        raise ValueError(f"Line ends before it starts: start={start} end={end}")


@dataclass(frozen=True, slots=True)
class PlainLine:
    start: int
    end: int
    content: str
    translation: str | None = None

    def __post_init__(self) -> None:
        _check_bounds(self.start, self.end)

    @property
    def duration(self) -> int:
        return self.end - self.start

    def to_karaoke_line(self) -> "KaraokeLine":
        return KaraokeLine(
            syllables=(Syllable(self.content, self.start, self.end),),
            translation=self.translation,
            is_accompaniment=False,
            alignment=Alignment.UNSPECIFIED,
            start=self.start,
            end=self.end,
        )


@dataclass(frozen=True, slots=True)
class KaraokeLine:
    syllables: tuple[Syllable, ...]
    translation: str | None
    is_accompaniment: bool
    alignment: Alignment
    start: int
    end: int
    phonetic: str | None = None

    def __post_init__(self) -> None:
        _check_bounds(self.start, self.end)

    @property
    def duration(self) -> int:
        return self.end - self.start

    @property
    def content(self) -> str:
        return "".join(s.content for s in self.syllables)

    def is_focused(self, now_ms: int) -> bool:
        if not self.is_accompaniment:
            return self.start <= now_ms <= self.end
        return (
            self.start - ACCOMPANIMENT_FOCUS_WINDOW_MS
            <= now_ms
            <= self.end + ACCOMPANIMENT_FOCUS_WINDOW_MS
        )

    def progress(self, now_ms: int) -> float:
        """
        0.0 before the line, linear while focused, 1.0 once it is over.
        """
        if now_ms < self.start:
            value = 0.0
        elif self.is_focused(now_ms):
            value = (now_ms - self.start) / self.duration if self.duration else 1.0
        elif now_ms > self.end:
            value = 1.0
        else:
            value = 0.0
        return min(max(value, 0.0), 1.0)


TimedLine = PlainLine | KaraokeLine
