from __future__ import annotations

import json
from xml.sax.saxutils import escape, quoteattr

from .model import UNBOUNDED_END, Alignment, KaraokeLine, LyricsDocument, PlainLine, TimedLine
from .utils.timecodec import format_time


def _line_text(line: TimedLine) -> str:
    if isinstance(line, KaraokeLine):
        return line.content.strip()
    return line.content


def export_json(doc: LyricsDocument) -> str:
    lines = []
    for line in doc.lines:
        item: dict = {
            "start": line.start,
            "end": None if line.end == UNBOUNDED_END else line.end,
            "text": _line_text(line),
            "translation": line.translation,
        }
        if isinstance(line, KaraokeLine):
            item["accompaniment"] = line.is_accompaniment
            item["alignment"] = line.alignment.value
            item["phonetic"] = line.phonetic
            item["syllables"] = [
                {"text": s.content, "start": s.start, "end": s.end, "phonetic": s.phonetic}
                for s in line.syllables
            ]
        lines.append(item)
    return json.dumps(
        {
            "title": doc.title,
            "id": doc.id,
            "artists": [{"type": a.type, "name": a.name} for a in doc.artists],
            "lines": lines,
        },
        ensure_ascii=False,
        indent=2,
    )


def _fmt_lrc_time(ms: int) -> str:
    m, rem = divmod(ms, 60_000)
    s, ms2 = divmod(rem, 1_000)
    # keep 2 decimals for compatibility
    return f"{m:02d}:{s:02d}.{ms2 // 10:02d}"


def export_lrc(doc: LyricsDocument, include_tags: bool = True) -> str:
    """
    Plain LRC. A translation repeats its line's stamp on the next line, and a
    gap after a line ends gets an empty stamp so the line doesn't linger.
    """
    if not doc.lines:
        return ""
    out: list[str] = []
    if include_tags:
        if doc.title.strip():
            out.append(f"[ti:{doc.title}]")
        if doc.artists and all(a.name.strip() for a in doc.artists):
            out.append("[ar:" + "/".join(f"{a.type}:{a.name}" for a in doc.artists) + "]")

    last_end: int | None = None
    for line in doc.lines:
        if last_end is not None and line.start > last_end:
            out.append(f"[{_fmt_lrc_time(last_end)}]")
        stamp = f"[{_fmt_lrc_time(line.start)}]"
        out.append(f"{stamp}{_line_text(line)}")
        if line.translation is not None:
            out.append(f"{stamp}{line.translation}")
        last_end = line.end if last_end is None else max(last_end, line.end)
    return "\n".join(out) + "\n"


def _fmt_srt_time(ms: int) -> str:
    # HH:MM:SS,mmm
    h, rem = divmod(ms, 3_600_000)
    m, rem = divmod(rem, 60_000)
    s, ms2 = divmod(rem, 1_000)
    return f"{h:02d}:{m:02d}:{s:02d},{ms2:03d}"


def export_srt(doc: LyricsDocument, last_line_duration_ms: int = 2000) -> str:
    """
    A line without a real end (last LRC line) lasts last_line_duration_ms.
    """
    if not doc.lines:
        return ""
    out: list[str] = []
    for i, line in enumerate(doc.lines, start=1):
        end = line.start + last_line_duration_ms if line.end == UNBOUNDED_END else line.end
        out.append(str(i))
        out.append(f"{_fmt_srt_time(line.start)} --> {_fmt_srt_time(max(end, line.start + 1))}")
        out.append(_line_text(line))
        if line.translation:
            out.append(line.translation)
        out.append("")
    return "\n".join(out)


_AGENTS = {Alignment.START: "v1", Alignment.END: "v2"}


def _ttml_spans(line: KaraokeLine, end: int) -> str:
    parts: list[str] = []
    for s in line.syllables:
        parts.append(
            f'<span begin="{format_time(s.start)}" end="{format_time(min(s.end, end))}">{escape(s.content.strip())}</span>'
        )
        if s.content.endswith(" "):
            parts.append(" ")
    if line.translation is not None:
        parts.append(f'<span ttm:role="x-translation" xml:lang="zh-CN">{escape(line.translation.strip())}</span>')
    return "".join(parts)


def export_ttml(doc: LyricsDocument, last_line_duration_ms: int = 2000) -> str:
    """
    Word-timed TTML. Agents are only declared for real duets (both sides used);
    plain lines are written as one-syllable karaoke lines, an open-ended last
    line lasts last_line_duration_ms.
    """
    if not doc.lines:
        return ""
    lines = [ln.to_karaoke_line() if isinstance(ln, PlainLine) else ln for ln in doc.lines]
    sides = {ln.alignment for ln in lines}
    duet = Alignment.START in sides and Alignment.END in sides

    ends = [
        max(ln.start + last_line_duration_ms if ln.end == UNBOUNDED_END else ln.end, ln.start) for ln in lines
    ]
    total = max(ends)

    out = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<tt xmlns="http://www.w3.org/ns/ttml" xmlns:itunes="http://music.apple.com/lyric-ttml-internal"'
        ' xmlns:ttm="http://www.w3.org/ns/ttml#metadata" itunes:timing="Word">',
        "  <head>",
    ]
    if duet or doc.title:
        out.append("    <metadata>")
        if doc.title:
            out.append(f"      <ttm:title>{escape(doc.title)}</ttm:title>")
        if duet:
            out.append('      <ttm:agent type="person" xml:id="v1"/>')
            out.append('      <ttm:agent type="person" xml:id="v2"/>')
        out.append("    </metadata>")
    out.append("  </head>")
    out.append(f'  <body dur="{format_time(total)}">')
    out.append(f'    <div begin="{format_time(lines[0].start)}" end="{format_time(total)}">')

    for line, end in zip(lines, ends):
        agent = f" ttm:agent={quoteattr(_AGENTS[line.alignment])}" if duet and line.alignment in _AGENTS else ""
        p_open = f'      <p begin="{format_time(line.start)}" end="{format_time(end)}"{agent}>'
        if line.is_accompaniment:
            body = (
                f'<span ttm:role="x-bg" begin="{format_time(line.start)}" end="{format_time(end)}">'
                f"{_ttml_spans(line, end)}</span>"
            )
        else:
            body = _ttml_spans(line, end)
        out.append(f"{p_open}{body}</p>")

    out.append("    </div>")
    out.append("  </body>")
    out.append("</tt>")
    return "\n".join(out) + "\n"
