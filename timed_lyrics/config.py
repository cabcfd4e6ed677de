from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("lrc", "ttml", "srt", "json")


def _config_dir() -> Path:
    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "timed-lyrics"
    return Path.home() / ".config" / "timed-lyrics"


def _config_file() -> Path:
    return _config_dir() / "config.json"


@dataclass(frozen=True)
class AppConfig:
    config_dir: Path

    # Parsing
    fallback_format: str | None  # used when the guesser recognises nothing

    # Export
    export_format: str
    srt_last_line_ms: int

    # `at` command
    context_lines: int  # lines above/below the active ones


def load_config() -> AppConfig:
    config_dir = _config_dir()
    stored = _load_stored(config_dir)

    # Priority: config.json → environment → default
    fallback = stored.get("fallback_format") or os.getenv("TIMED_LYRICS_FALLBACK_FORMAT") or None
    export_format = (
        stored.get("export_format") or os.getenv("TIMED_LYRICS_EXPORT_FORMAT") or "lrc"
    ).lower()
    if export_format not in EXPORT_FORMATS:
        logger.info("Unknown export format '%s' in config, using lrc", export_format)
        export_format = "lrc"

    return AppConfig(
        config_dir=config_dir,
        fallback_format=fallback.upper() if fallback else None,
        export_format=export_format,
        srt_last_line_ms=int(os.getenv("TIMED_LYRICS_SRT_LAST_LINE_MS", "2000")),
        context_lines=int(os.getenv("TIMED_LYRICS_CONTEXT_LINES", "1")),
    )


def _load_stored(config_dir: Path) -> dict[str, str]:
    cfg_path = config_dir / "config.json"
    if not cfg_path.exists():
        return {}
    try:
        data = json.loads(cfg_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable config %s: %s", cfg_path, e)
        return {}
    if not isinstance(data, dict):
        return {}
    return {k: str(v) for k, v in data.items() if v}


def save_config_value(key: str, value: str) -> None:
    cfg_path = _config_file()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    data: dict[str, str] = {}
    if cfg_path.exists():
        try:
            data = json.loads(cfg_path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            pass
    data[key] = value
    cfg_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
