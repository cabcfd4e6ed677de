from __future__ import annotations


def _to_int(s: str) -> int:
    s = s.strip()
    if not s.isdecimal():
        return 0
    return int(s)


def _parse_seconds(part: str) -> int:
    sec, dot, frac = part.partition(".")
    ms = _to_int(sec) * 1000
    if not dot:
        return ms
    # "4" -> 400ms, "45" -> 450ms, "4567" -> 456ms (truncated, not rounded)
    return ms + _to_int(frac.ljust(3, "0")[:3])


def parse_time(text: str) -> int:
    """
    Parse `SS[.fff]`, `MM:SS[.fff]` or `H:MM:SS[.fff]` into milliseconds.

    Groups that don't parse count as 0; anything with more than three groups
    is 0 altogether.
    """
    parts = text.strip().split(":")
    if len(parts) == 3:
        return _to_int(parts[0]) * 3_600_000 + _to_int(parts[1]) * 60_000 + _parse_seconds(parts[2])
    if len(parts) == 2:
        return _to_int(parts[0]) * 60_000 + _parse_seconds(parts[1])
    if len(parts) == 1:
        return _parse_seconds(parts[0])
    return 0


def format_time(ms: int) -> str:
    # HH:MM:SS.mmm
    if ms < 0:
        return "00:00:00.000"
    h, rem = divmod(ms, 3_600_000)
    m, rem = divmod(rem, 60_000)
    s, ms2 = divmod(rem, 1_000)
    return f"{h:02d}:{m:02d}:{s:02d}.{ms2:03d}"
