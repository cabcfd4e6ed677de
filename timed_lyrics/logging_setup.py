from __future__ import annotations

import logging
import os
import sys


def _resolve_level(debug: bool, quiet: bool) -> int:
    if debug:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    # TIMED_LYRICS_LOG_LEVEL=debug beats the flags
    level_name = os.getenv("TIMED_LYRICS_LOG_LEVEL")
    if level_name:
        named = logging.getLevelName(level_name.upper())
        if isinstance(named, int):
            level = named
    return level


def setup_logging(debug: bool, quiet: bool = False) -> None:
    # stdout carries exported lyrics, so logs go to stderr
    logging.basicConfig(
        level=_resolve_level(debug, quiet),
        stream=sys.stderr,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
