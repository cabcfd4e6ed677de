from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

from timed_lyrics.model import Artist

_OFFSET_RE = re.compile(r"^\[offset:\s*([+-]?\d+)\s*\]\s*$", re.IGNORECASE)
_TAG_RE = re.compile(r"^\[([a-zA-Z]{1,8}):(.*)\]\s*$")
# line stamps [mm:ss.xx] and inline word stamps <mm:ss.xx>
_STAMP_RE = re.compile(r"[\[<]\d{1,3}:\d{1,2}(?:\.\d{1,3})?[\]>]")


@dataclass(slots=True)
class LrcHeader:
    offset_ms: int = 0
    tags: dict[str, str] = field(default_factory=dict)

    @property
    def title(self) -> str:
        return self.tags.get("ti", "")

    @property
    def artists(self) -> tuple[Artist, ...]:
        raw = self.tags.get("ar", "")
        out: list[Artist] = []
        for part in raw.split("/"):
            part = part.strip()
            if not part:
                continue
            kind, sep, name = part.partition(":")
            if sep and kind.strip() and name.strip():
                out.append(Artist(type=kind.strip(), name=name.strip()))
            else:
                out.append(Artist(type="artist", name=part))
        return tuple(out)


def split_header(lines: Iterable[str]) -> tuple[LrcHeader, list[str]]:
    """
    Separate `[ti:...]`, `[ar:...]`, `[offset:...]` and other attribute lines
    from the timed body. Lines carrying a timestamp are never treated as tags.
    """
    header = LrcHeader()
    body: list[str] = []
    for raw in lines:
        line = raw.rstrip("\r\n")
        stripped = line.strip()

        off = _OFFSET_RE.match(stripped)
        if off:
            header.offset_ms = int(off.group(1))
            continue

        tag = _TAG_RE.match(stripped)
        if tag and not _STAMP_RE.search(stripped):
            k = tag.group(1).strip().lower()
            v = tag.group(2).strip()
            if k and v:
                header.tags[k] = v
            continue

        body.append(line)
    return header, body


def remove_attributes(lines: Iterable[str]) -> list[str]:
    return split_header(lines)[1]
