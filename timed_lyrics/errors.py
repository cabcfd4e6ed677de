class LyricsError(ValueError):
    pass


class UnknownFormatError(LyricsError):
    pass


class UnsupportedFormatError(LyricsError):
    pass
