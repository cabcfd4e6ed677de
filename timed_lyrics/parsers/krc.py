from __future__ import annotations

import base64
import binascii
import json
import logging
import re
from dataclasses import dataclass, field

from timed_lyrics.model import Alignment, KaraokeLine, LyricsDocument, Syllable

from .base import LyricsParser

logger = logging.getLogger(__name__)

_LINE_RE = re.compile(r"^\[(\d+),(\d+)](.*)$")
_BG_LINE_RE = re.compile(r"^\[bg:(.*)](.*)$")
_LANGUAGE_LINE_RE = re.compile(r"^\[language:(.*)]\s*$")
_SYLLABLE_RE = re.compile(r"<(\d+),(\d+),\d+>")

# Kugou encodes the speaker label colon as a token of its own.
_LABEL_COLON = "："
_ROLE_MARKS = (":", "：")

# Lines whose stamp doesn't move forward are pushed just past the previous one.
MIN_LINE_STEP_MS = 3

_TRANSLATION = (1, 0)  # (type, language)
_PHONETIC = (0, 0)


@dataclass(frozen=True, slots=True)
class _Token:
    offset: int
    duration: int
    text: str


@dataclass(slots=True)
class LanguageBlock:
    """Rows decoded from `[language:<base64>]`, one per normal lyric line."""

    translations: list[str] = field(default_factory=list)
    phonetics: list[list[str]] = field(default_factory=list)


@dataclass(slots=True)
class _ParseState:
    # reset for every parse call
    alignment: Alignment = Alignment.START
    last_line_start: int = -1
    line_index: int = 0


def decode_language_block(payload: str) -> LanguageBlock:
    """
    Decode the base64 JSON side channel:
    `{"content": [{"type": 1, "language": 0, "lyricContent": [["frag", ...], ...]}]}`.

    Anything malformed yields an empty block.
    """
    payload = payload.strip()
    if not payload:
        return LanguageBlock()
    payload += "=" * (-len(payload) % 4)
    try:
        data = json.loads(base64.b64decode(payload, validate=True).decode("utf-8"))
        content = data["content"]
        block = LanguageBlock()
        for entry in content:
            key = (int(entry["type"]), int(entry["language"]))
            rows = [[str(frag) for frag in row] for row in entry.get("lyricContent") or []]
            if key == _TRANSLATION:
                block.translations.extend("".join(row) for row in rows)
            elif key == _PHONETIC:
                block.phonetics.extend(rows)
        return block
    except (binascii.Error, UnicodeDecodeError, ValueError, KeyError, TypeError, AttributeError) as e:
        logger.warning("Ignoring malformed KRC language block: %s", e)
        return LanguageBlock()


def _tokenize(content: str) -> list[_Token]:
    marks = list(_SYLLABLE_RE.finditer(content))
    out: list[_Token] = []
    for i, m in enumerate(marks):
        stop = marks[i + 1].start() if i + 1 < len(marks) else len(content)
        out.append(_Token(int(m.group(1)), int(m.group(2)), content[m.end() : stop]))
    return out


def _merge_label_colons(tokens: list[_Token]) -> list[_Token]:
    # "A" + "：" -> "A：", timed like the colon
    out: list[_Token] = []
    i = 0
    while i < len(tokens):
        tok = tokens[i]
        nxt = tokens[i + 1] if i + 1 < len(tokens) else None
        if nxt is not None and len(tok.text) == 1 and nxt.text == _LABEL_COLON:
            out.append(_Token(nxt.offset, nxt.duration, tok.text + _LABEL_COLON))
            i += 2
        else:
            out.append(tok)
            i += 1
    return out


def parse_syllables(content: str, line_start: int) -> list[Syllable]:
    return [
        Syllable(t.text, line_start + t.offset, line_start + t.offset + t.duration)
        for t in _merge_label_colons(_tokenize(content))
    ]


def _has_role_mark(text: str) -> bool:
    return len(text) > 1 and (text.startswith(_ROLE_MARKS) or text.endswith(_ROLE_MARKS))


class KrcParser(LyricsParser):
    """
    Kugou KRC: `[start,duration]<offset,duration,0>syl<...>syl` lines, `[bg:...]`
    accompaniment lines and an optional `[language:...]` translation block.
    """

    name = "KUGOU_KRC"

    def parse(self, content: str) -> LyricsDocument:
        raw_lines = content.splitlines()

        block = LanguageBlock()
        for raw in raw_lines:
            m = _LANGUAGE_LINE_RE.search(raw.strip())
            if m:
                block = decode_language_block(m.group(1))
                break

        state = _ParseState()
        out: list[KaraokeLine] = []
        for raw in raw_lines:
            line = raw.strip()
            if not line or _LANGUAGE_LINE_RE.search(line):
                continue

            bg = _BG_LINE_RE.search(line)
            if bg:
                parsed = self._accompaniment_line(bg.group(1))
            else:
                m = _LINE_RE.search(line)
                if not m:
                    logger.debug("Skipping unrecognised KRC line: %r", line)
                    continue
                parsed = self._lyric_line(int(m.group(1)), m.group(3), block, state)

            if parsed is not None:
                out.append(parsed)

        return LyricsDocument.build(out)

    def _accompaniment_line(self, content: str) -> KaraokeLine | None:
        # accompaniment offsets are absolute
        syllables = parse_syllables(content, 0)
        if not syllables:
            return None
        return KaraokeLine(
            syllables=tuple(syllables),
            translation=None,
            is_accompaniment=True,
            alignment=Alignment.UNSPECIFIED,
            start=syllables[0].start,
            end=max(syllables[-1].end, syllables[0].start),
        )

    def _lyric_line(self, line_start: int, content: str, block: LanguageBlock, state: _ParseState) -> KaraokeLine | None:
        if state.last_line_start != -1 and line_start <= state.last_line_start:
            line_start = state.last_line_start + MIN_LINE_STEP_MS
        state.last_line_start = line_start

        index = state.line_index
        state.line_index += 1

        syllables = parse_syllables(content, line_start)
        if not syllables:
            logger.debug("KRC line at %dms has no syllables, dropped", line_start)
            return None

        phonetic_row = block.phonetics[index] if index < len(block.phonetics) else []
        if phonetic_row:
            syllables = [
                Syllable(s.content, s.start, s.end, phonetic_row[j]) if j < len(phonetic_row) else s
                for j, s in enumerate(syllables)
            ]

        text = "".join(s.content for s in syllables)
        if _has_role_mark(text):
            state.alignment = Alignment.END if state.alignment is Alignment.START else Alignment.START

        translation = block.translations[index] if index < len(block.translations) else None
        if translation is not None and not translation.strip():
            translation = None

        return KaraokeLine(
            syllables=tuple(syllables),
            translation=translation,
            is_accompaniment=False,
            alignment=state.alignment,
            start=syllables[0].start,
            end=max(syllables[-1].end, syllables[0].start),
            phonetic="".join(phonetic_row) or None,
        )


def parse_krc(text: str) -> LyricsDocument:
    return KrcParser().parse(text)
