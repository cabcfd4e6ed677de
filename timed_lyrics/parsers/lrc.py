from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import Iterable

from timed_lyrics.model import UNBOUNDED_END, LyricsDocument, PlainLine
from timed_lyrics.utils.timecodec import parse_time

from .base import LyricsParser
from .metadata import split_header

logger = logging.getLogger(__name__)

_TS_RE = re.compile(r"\[(\d{1,3}:\d{1,2}(?:\.\d{1,3})?)\]")  # [mm:ss] / [mm:ss.xx] / [mm:ss.xxx]


@dataclass(frozen=True, slots=True)
class _RawLine:
    start: int
    content: str
    translation: str | None = None
    end: int = 0


def _split_timed(line: str, offset_ms: int) -> list[_RawLine]:
    """
    Every `[time]content` occurrence on one physical line. Stamps with nothing
    between them (`[00:01.00][00:20.00]chorus`) share the text that follows.
    """
    stamps = list(_TS_RE.finditer(line))
    out: list[_RawLine] = []
    pending: list[int] = []
    for i, m in enumerate(stamps):
        stop = stamps[i + 1].start() if i + 1 < len(stamps) else len(line)
        text = line[m.end() : stop].strip()
        pending.append(max(parse_time(m.group(1)) + offset_ms, 0))
        if text or i + 1 == len(stamps):
            out.extend(_RawLine(start=t, content=text) for t in pending)
            pending = []
    return out


def _pair_translations(lines: list[_RawLine]) -> list[_RawLine]:
    out: list[_RawLine] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        nxt = lines[i + 1] if i + 1 < len(lines) else None
        if nxt is not None and nxt.start == line.start:
            out.append(replace(line, translation=nxt.content))
            i += 2  # the next line was the translation
        else:
            out.append(line)
            i += 1
    return out


def _infer_ends(lines: list[_RawLine]) -> list[_RawLine]:
    return [
        replace(line, end=lines[i + 1].start if i + 1 < len(lines) else UNBOUNDED_END)
        for i, line in enumerate(lines)
    ]


class LrcParser(LyricsParser):
    """
    Line-timed LRC.

    - [mm:ss], [mm:ss.xx], [mm:ss.xxx], several stamps per line
    - a line repeated with the same stamp is the previous line's translation
    - end time is the next line's start; the last line never ends
    - [ti:], [ar:] become title/artists, [offset:+/-ms] shifts every line
    """

    name = "LRC"

    def parse(self, content: str) -> LyricsDocument:
        return self.parse_lines(content.splitlines())

    def parse_lines(self, lines: Iterable[str]) -> LyricsDocument:
        header, body = split_header(lines)

        raw: list[_RawLine] = []
        for line in body:
            found = _split_timed(line, header.offset_ms)
            if not found and line.strip():
                logger.debug("Skipping untimed LRC line: %r", line)
            raw.extend(found)

        # repeated stamps ([00:10.00][01:10.00]chorus) put lines out of order;
        # the sort is stable so a translation stays right after its line
        raw.sort(key=lambda r: r.start)

        out: list[PlainLine] = []
        for r in _infer_ends(_pair_translations(raw)):
            if not r.content.strip():
                continue
            out.append(PlainLine(start=r.start, end=r.end, content=r.content, translation=r.translation))

        return LyricsDocument.build(out, title=header.title, artists=header.artists)


def parse_lrc(text: str) -> LyricsDocument:
    return LrcParser().parse(text)


def parse_lrc_lines(lines: Iterable[str]) -> LyricsDocument:
    return LrcParser().parse_lines(lines)
