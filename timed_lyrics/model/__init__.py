from .document import DocumentStats, LyricsDocument, document_stats
from .lines import (
    ACCOMPANIMENT_FOCUS_WINDOW_MS,
    UNBOUNDED_END,
    Alignment,
    Artist,
    KaraokeLine,
    PlainLine,
    Syllable,
    TimedLine,
)

__all__ = [
    "ACCOMPANIMENT_FOCUS_WINDOW_MS",
    "UNBOUNDED_END",
    "Alignment",
    "Artist",
    "DocumentStats",
    "KaraokeLine",
    "LyricsDocument",
    "PlainLine",
    "Syllable",
    "TimedLine",
    "document_stats",
]
