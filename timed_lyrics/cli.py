from __future__ import annotations

import json
from pathlib import Path

import typer

from timed_lyrics.config import EXPORT_FORMATS, AppConfig, load_config, save_config_value
from timed_lyrics.errors import LyricsError
from timed_lyrics.export import export_json, export_lrc, export_srt, export_ttml
from timed_lyrics.logging_setup import setup_logging
from timed_lyrics.model import UNBOUNDED_END, KaraokeLine, LyricsDocument, document_stats
from timed_lyrics.parsers import PARSERS, parse_lyrics
from timed_lyrics.utils.guesser import FormatGuesser
from timed_lyrics.utils.timecodec import format_time, parse_time


app = typer.Typer(no_args_is_help=True, add_completion=False)


@app.callback()
def main_options(
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", help="Only log warnings and errors"),
):
    """
    Parse LRC, enhanced LRC, Kugou KRC and TTML lyrics into timed lines.
    """
    setup_logging(debug, quiet)


def _load(path: Path, fmt: str | None, cfg: AppConfig) -> tuple[str, LyricsDocument]:
    text = path.read_text(encoding="utf-8")
    name = fmt.upper() if fmt else FormatGuesser().guess(text) or cfg.fallback_format
    if name is None:
        typer.echo(f"Could not recognise the lyrics format of {path}", err=True)
        raise typer.Exit(code=1)
    try:
        return name, parse_lyrics(text, name)
    except LyricsError as e:
        raise typer.BadParameter(str(e)) from e


@app.command()
def guess(path: Path):
    """Print the guessed lyrics format."""
    name = FormatGuesser().guess(path.read_text(encoding="utf-8"))
    if name is None:
        typer.echo("unknown")
        raise typer.Exit(code=1)
    typer.echo(name)


@app.command()
def parse(
    path: Path,
    fmt: str | None = typer.Option(None, "--format", help=f"Skip guessing: {'|'.join(PARSERS)}"),
):
    """Parse lyrics and print stats."""
    name, doc = _load(path, fmt, load_config())
    stats = document_stats(doc)
    typer.echo(f"format={name}")
    typer.echo(f"title={doc.title}")
    typer.echo(f"artists={', '.join(a.name for a in doc.artists)}")
    typer.echo(f"lines_total={stats.lines_total}")
    typer.echo(f"plain_lines={stats.plain_lines}")
    typer.echo(f"karaoke_lines={stats.karaoke_lines}")
    typer.echo(f"accompaniment_lines={stats.accompaniment_lines}")
    typer.echo(f"translated_lines={stats.translated_lines}")
    typer.echo(f"phonetic_lines={stats.phonetic_lines}")
    typer.echo(f"syllables_total={stats.syllables_total}")


@app.command()
def export(
    path: Path,
    to: str | None = typer.Option(None, "--to", case_sensitive=False, help="|".join(EXPORT_FORMATS)),
    fmt: str | None = typer.Option(None, "--format", help="Input format, guessed by default"),
    out: Path | None = typer.Option(None, "--out", help="Output file (default: stdout)"),
):
    """Convert lyrics to LRC/TTML/SRT/JSON."""
    cfg = load_config()
    _name, doc = _load(path, fmt, cfg)
    target = (to or cfg.export_format).lower()
    if target == "json":
        data = export_json(doc)
    elif target == "lrc":
        data = export_lrc(doc)
    elif target == "ttml":
        data = export_ttml(doc, last_line_duration_ms=cfg.srt_last_line_ms)
    elif target == "srt":
        data = export_srt(doc, last_line_duration_ms=cfg.srt_last_line_ms)
    else:
        raise typer.BadParameter(f"--to must be one of: {', '.join(EXPORT_FORMATS)}")

    if out:
        out.write_text(data, encoding="utf-8")
    else:
        typer.echo(data, nl=False)


def _describe(doc: LyricsDocument, i: int) -> str:
    line = doc.lines[i]
    end = "…" if line.end == UNBOUNDED_END else format_time(line.end)
    tags = ""
    if isinstance(line, KaraokeLine):
        tags = f" [{line.alignment.value}{', bg' if line.is_accompaniment else ''}]"
    text = line.content.strip()
    if line.translation:
        text += f" / {line.translation}"
    return f"{i:>4} {format_time(line.start)} → {end}{tags} {text}"


@app.command()
def at(
    path: Path,
    time: str = typer.Argument(..., help="Playback position: milliseconds or [H:]MM:SS.mmm"),
    fmt: str | None = typer.Option(None, "--format", help="Input format, guessed by default"),
    json_output: bool = typer.Option(False, "--json", help="Output active indices as JSON"),
):
    """Show the line(s) active at a playback position."""
    cfg = load_config()
    _name, doc = _load(path, fmt, cfg)
    now_ms = int(time) if time.isdecimal() else parse_time(time)

    active = doc.all_highlight_indices(now_ms)
    first = doc.first_highlight_index(now_ms)
    if json_output:
        typer.echo(json.dumps({"time": now_ms, "first": first, "active": active}))
        return

    lo = max(min(active or [first]) - cfg.context_lines, 0)
    hi = min(max(active or [first]) + cfg.context_lines, len(doc.lines) - 1)
    for i in range(lo, hi + 1):
        row = _describe(doc, i)
        typer.echo(typer.style(row, bold=True) if i in active else row)
    if not active:
        typer.echo(f"(nothing active at {format_time(now_ms)})")


@app.command()
def config(
    fallback_format: str | None = typer.Option(None, "--fallback-format", help="Format to use when guessing fails"),
    export_format: str | None = typer.Option(None, "--export-format", help="Default --to for export"),
):
    """Show or change saved settings."""
    if fallback_format:
        if fallback_format.upper() not in PARSERS:
            raise typer.BadParameter(f"--fallback-format must be one of: {', '.join(PARSERS)}")
        save_config_value("fallback_format", fallback_format.upper())
    if export_format:
        if export_format.lower() not in EXPORT_FORMATS:
            raise typer.BadParameter(f"--export-format must be one of: {', '.join(EXPORT_FORMATS)}")
        save_config_value("export_format", export_format.lower())

    cfg = load_config()
    typer.echo(f"config_dir={cfg.config_dir}")
    typer.echo(f"fallback_format={cfg.fallback_format or ''}")
    typer.echo(f"export_format={cfg.export_format}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
