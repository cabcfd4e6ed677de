from __future__ import annotations

import logging

from timed_lyrics.errors import UnknownFormatError, UnsupportedFormatError
from timed_lyrics.model import LyricsDocument
from timed_lyrics.utils.guesser import FormatGuesser

from .base import LyricsParser
from .enhanced_lrc import EnhancedLrcParser, parse_enhanced_lrc
from .krc import KrcParser, parse_krc
from .lrc import LrcParser, parse_lrc, parse_lrc_lines
from .ttml import TtmlParser, parse_ttml

logger = logging.getLogger(__name__)

PARSERS: dict[str, type[LyricsParser]] = {
    cls.name: cls for cls in (LrcParser, EnhancedLrcParser, KrcParser, TtmlParser)
}


def get_parser(fmt: str) -> LyricsParser:
    try:
        return PARSERS[fmt.upper()]()
    except KeyError:
        raise UnsupportedFormatError(f"No parser for lyrics format: {fmt}") from None


def parse_lyrics(
    text: str,
    fmt: str | None = None,
    *,
    guesser: FormatGuesser | None = None,
) -> LyricsDocument:
    """
    Parse `text` as `fmt`, or as whatever the guesser recognises.

    Raises UnknownFormatError when nothing matches and UnsupportedFormatError
    for a recognised format without a parser.
    """
    if fmt is None:
        fmt = (guesser or FormatGuesser()).guess(text)
        if fmt is None:
            raise UnknownFormatError("Could not recognise lyrics format")
    parser = get_parser(fmt)
    logger.debug("Parsing %d chars as %s", len(text), parser.name)
    return parser.parse(text)


__all__ = [
    "PARSERS",
    "EnhancedLrcParser",
    "KrcParser",
    "LrcParser",
    "LyricsParser",
    "TtmlParser",
    "get_parser",
    "parse_enhanced_lrc",
    "parse_krc",
    "parse_lrc",
    "parse_lrc_lines",
    "parse_lyrics",
    "parse_ttml",
]
