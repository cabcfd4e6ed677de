from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from timed_lyrics.model import Alignment, KaraokeLine, LyricsDocument, Syllable
from timed_lyrics.utils.timecodec import parse_time

from .base import LyricsParser
from .metadata import split_header

logger = logging.getLogger(__name__)

_LINE_RE = re.compile(r"^\[(\d{1,3}:\d{1,2}(?:\.\d{1,3})?)\](.*)$")
_BG_RE = re.compile(r"^\[bg:(.*)\]\s*$")
_VOICE_RE = re.compile(r"^\s*(v[12]):\s?")
_WORD_RE = re.compile(r"<(\d{1,3}:\d{1,2}(?:\.\d{1,3})?)>")

_VOICES = {"v1": Alignment.START, "v2": Alignment.END}


@dataclass(frozen=True, slots=True)
class _Entry:
    start: int | None  # None for [bg:] lines, which carry no line stamp
    body: str
    alignment: Alignment
    is_accompaniment: bool


def _words(body: str, line_start: int | None, line_end: int | None, offset_ms: int = 0) -> list[Syllable]:
    """
    `<00:01.00>Hey <00:01.40>you<00:01.90>`: each word runs until the next
    stamp; a bare trailing stamp only closes the last word.
    """
    marks = list(_WORD_RE.finditer(body))
    if not marks:
        text = body.strip()
        if not text or line_start is None:
            return []
        return [Syllable(text, line_start, max(line_end if line_end is not None else line_start, line_start))]

    times = [max(parse_time(m.group(1)) + offset_ms, 0) for m in marks]
    out: list[Syllable] = []

    lead = body[: marks[0].start()]
    if lead.strip() and line_start is not None:
        out.append(Syllable(lead.lstrip(), line_start, max(times[0], line_start)))

    for i, m in enumerate(marks):
        stop = marks[i + 1].start() if i + 1 < len(marks) else len(body)
        text = body[m.end() : stop]
        if not text.strip():
            continue
        start = times[i]
        if i + 1 < len(marks):
            end = times[i + 1]
        elif line_end is not None:
            end = line_end
        else:
            end = start
        out.append(Syllable(text, start, max(end, start)))

    if out:
        last = out[-1]
        out[-1] = Syllable(last.content.rstrip(), last.start, last.end)
    return out


class EnhancedLrcParser(LyricsParser):
    """
    Word-timed ("A2") LRC: `[mm:ss.xx]v1: <mm:ss.xx>word <mm:ss.xx>word`.

    v1/v2 voice markers pick the duet side, `[bg:...]` lines are accompaniment
    for the line before them, and a stamp-only repeat of the previous line's
    stamp is its translation.
    """

    name = "ENHANCED_LRC"

    def parse(self, content: str) -> LyricsDocument:
        header, body = split_header(content.splitlines())

        entries: list[_Entry] = []
        last_alignment = Alignment.UNSPECIFIED
        for raw in body:
            line = raw.strip()
            if not line:
                continue
            bg = _BG_RE.search(line)
            if bg:
                entries.append(_Entry(None, bg.group(1), last_alignment, True))
                continue
            m = _LINE_RE.search(line)
            if not m:
                logger.debug("Skipping untimed line: %r", line)
                continue
            rest = m.group(2)
            voice = _VOICE_RE.search(rest)
            alignment = Alignment.UNSPECIFIED
            if voice:
                alignment = _VOICES[voice.group(1)]
                rest = rest[voice.end() :]
            start = max(parse_time(m.group(1)) + header.offset_ms, 0)
            entries.append(_Entry(start, rest, alignment, False))
            last_alignment = alignment

        main_starts = [e.start for e in entries if e.start is not None]
        out: list[KaraokeLine] = []
        main_index = -1
        for entry in entries:
            if entry.is_accompaniment:
                syllables = _words(entry.body, None, None, header.offset_ms)
            else:
                main_index += 1
                # the line runs until the next line that starts later
                nxt = next((s for s in main_starts[main_index + 1 :] if s > entry.start), None)
                # [bg:] lines may sit between a line and its translation
                prev_i = next((j for j in range(len(out) - 1, -1, -1) if not out[j].is_accompaniment), None)
                prev = out[prev_i] if prev_i is not None else None
                if prev is not None and prev.start == entry.start and not _WORD_RE.search(entry.body):
                    text = entry.body.strip()
                    if text and prev.translation is None:
                        out[prev_i] = KaraokeLine(
                            syllables=prev.syllables,
                            translation=text,
                            is_accompaniment=False,
                            alignment=prev.alignment,
                            start=prev.start,
                            end=prev.end,
                        )
                    continue
                syllables = _words(entry.body, entry.start, nxt, header.offset_ms)

            if not syllables:
                continue
            start = entry.start if entry.start is not None else syllables[0].start
            start = min(start, syllables[0].start)
            out.append(
                KaraokeLine(
                    syllables=tuple(syllables),
                    translation=None,
                    is_accompaniment=entry.is_accompaniment,
                    alignment=entry.alignment,
                    start=start,
                    end=max(syllables[-1].end, start),
                )
            )

        return LyricsDocument.build(out, title=header.title, artists=header.artists)


def parse_enhanced_lrc(text: str) -> LyricsDocument:
    return EnhancedLrcParser().parse(text)
