from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable

logger = logging.getLogger(__name__)

TTML = "TTML"
LRC = "LRC"
ENHANCED_LRC = "ENHANCED_LRC"
LYRICIFY_SYLLABLE = "LYRICIFY_SYLLABLE"
KUGOU_KRC = "KUGOU_KRC"

_TTML_ROOT_RE = re.compile(r"<tt.*xmlns.*=.*http://www.w3.org/ns/ttml.*>")
_LRC_LINE_RE = re.compile(r"\[\d{2}:\d{2}\.\d{2,3}].+")
_LRC_STAMP_RE = re.compile(r"\[\d{2}:\d{2}\.\d{2,3}]")
_VOICE_TAG_RE = re.compile(r"\]v[12]:")
_INLINE_STAMP_RE = re.compile(r"<\d{2}:\d{2}\.\d{2,3}>")
_LYRICIFY_WORD_RE = re.compile(r"[a-zA-Z]+\s*\(\d+,\d+\)")
_KRC_LINE_RE = re.compile(r"^\[\d+,\d+]")
_KRC_WORD_RE = re.compile(r"<\d+,\d+,\d+>.")


def _is_ttml(text: str) -> bool:
    return _TTML_ROOT_RE.search(text) is not None


def _is_lrc(text: str) -> bool:
    return _LRC_LINE_RE.search(text) is not None


def _is_enhanced_lrc(text: str) -> bool:
    if _VOICE_TAG_RE.search(text):
        return True
    # line-level stamps together with inline word stamps
    return _LRC_STAMP_RE.search(text) is not None and _INLINE_STAMP_RE.search(text) is not None


def _is_lyricify_syllable(text: str) -> bool:
    return _LYRICIFY_WORD_RE.search(text) is not None


def _is_kugou_krc(text: str) -> bool:
    for raw in text.splitlines():
        line = raw.strip()
        if line and _KRC_LINE_RE.search(line) and _KRC_WORD_RE.search(line):
            return True
    return False


@dataclass(frozen=True, slots=True)
class LyricsFormat:
    name: str
    detector: Callable[[str], bool]


class FormatGuesser:
    """
    Content sniffing over an ordered list of detectors.

    Detectors overlap (every enhanced LRC file is also an LRC file), so order
    is the tie-break: `register` puts a detector in front, and the most
    recently registered one that matches wins.
    """

    def __init__(self, *, defaults: bool = True):
        self._formats: list[LyricsFormat] = []
        if defaults:
            self.register(TTML, _is_ttml)
            # LRC must be registered before ENHANCED_LRC
            self.register(LRC, _is_lrc)
            self.register(ENHANCED_LRC, _is_enhanced_lrc)
            self.register(LYRICIFY_SYLLABLE, _is_lyricify_syllable)
            self.register(KUGOU_KRC, _is_kugou_krc)

    @property
    def formats(self) -> tuple[LyricsFormat, ...]:
        return tuple(self._formats)

    def register(self, name: str, detector: Callable[[str], bool]) -> None:
        self._formats.insert(0, LyricsFormat(name, detector))

    def guess(self, text: str) -> str | None:
        for fmt in self._formats:
            if fmt.detector(text):
                logger.debug("Guessed lyrics format: %s", fmt.name)
                return fmt.name
        return None

    def guess_lines(self, lines: Iterable[str]) -> str | None:
        return self.guess("\n".join(lines))
