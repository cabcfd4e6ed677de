from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from timed_lyrics.sync.tracker import all_highlight_indices, first_highlight_index

from .lines import Artist, KaraokeLine, PlainLine, TimedLine


@dataclass(frozen=True, slots=True)
class LyricsDocument:
    lines: tuple[TimedLine, ...]
    title: str = ""
    id: str = "0"
    artists: tuple[Artist, ...] = ()

    @classmethod
    def build(
        cls,
        lines: Iterable[TimedLine],
        *,
        title: str = "",
        id: str = "0",
        artists: Iterable[Artist] = (),
    ) -> "LyricsDocument":
        # sorted() is stable: equal starts keep their input order
        ordered = tuple(sorted(lines, key=lambda ln: ln.start))
        return cls(lines=ordered, title=title, id=id, artists=tuple(artists))

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def first_highlight_index(self, now_ms: int) -> int:
        return first_highlight_index(self.lines, now_ms)

    def all_highlight_indices(self, now_ms: int) -> list[int]:
        return all_highlight_indices(self.lines, now_ms)


@dataclass(frozen=True, slots=True)
class DocumentStats:
    lines_total: int
    plain_lines: int
    karaoke_lines: int
    accompaniment_lines: int
    translated_lines: int
    phonetic_lines: int
    syllables_total: int


def document_stats(doc: LyricsDocument) -> DocumentStats:
    plain = karaoke = bg = translated = phonetic = syllables = 0
    for line in doc.lines:
        if line.translation:
            translated += 1
        if isinstance(line, PlainLine):
            plain += 1
        elif isinstance(line, KaraokeLine):
            karaoke += 1
            syllables += len(line.syllables)
            if line.is_accompaniment:
                bg += 1
            if line.phonetic or any(s.phonetic for s in line.syllables):
                phonetic += 1
    return DocumentStats(
        lines_total=len(doc.lines),
        plain_lines=plain,
        karaoke_lines=karaoke,
        accompaniment_lines=bg,
        translated_lines=translated,
        phonetic_lines=phonetic,
        syllables_total=syllables,
    )
