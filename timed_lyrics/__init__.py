from timed_lyrics.model import (
    Alignment,
    Artist,
    KaraokeLine,
    LyricsDocument,
    PlainLine,
    Syllable,
    TimedLine,
)
from timed_lyrics.parsers import parse_enhanced_lrc, parse_krc, parse_lrc, parse_lyrics, parse_ttml
from timed_lyrics.sync.tracker import HighlightTracker
from timed_lyrics.utils.guesser import FormatGuesser

__version__ = "0.1.0"

__all__ = [
    "Alignment",
    "Artist",
    "FormatGuesser",
    "HighlightTracker",
    "KaraokeLine",
    "LyricsDocument",
    "PlainLine",
    "Syllable",
    "TimedLine",
    "parse_enhanced_lrc",
    "parse_krc",
    "parse_lrc",
    "parse_lyrics",
    "parse_ttml",
]
