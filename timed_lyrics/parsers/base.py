from __future__ import annotations

from typing import Iterable

from timed_lyrics.model import LyricsDocument


class LyricsParser:
    """
    One parser per grammar. Parsing never raises on malformed input: bad
    fragments are skipped and the worst case is an empty document.
    """

    name: str

    def parse(self, content: str) -> LyricsDocument:
        raise NotImplementedError

    def parse_lines(self, lines: Iterable[str]) -> LyricsDocument:
        return self.parse("\n".join(lines))
