from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import PIL
import typer

from photostamp.config import load_config, write_default_config
from photostamp.decoders.image_codec import OPTIONAL_FEATURES, REQUIRED_FEATURES, missing_capabilities
from photostamp.discover import discover_inputs
from photostamp.errors import ImageLoadError, SetupError
from photostamp.meta.normalize import extract_metadata
from photostamp.meta.reader import read_tag_dictionary
from photostamp.meta.report import write_report
from photostamp.pipeline import process_directory
from photostamp.render.typography import select_text_layout
from photostamp.style import normalize_style_dict

app = typer.Typer(add_completion=False, no_args_is_help=True, help="Photo metadata banner CLI.")
LOGGER = logging.getLogger("photostamp")


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def _fail(message: str) -> typer.Exit:
    typer.secho(message, err=True, fg=typer.colors.RED)
    return typer.Exit(1)


def _load_config_or_exit(path: Path | None) -> dict[str, Any]:
    try:
        return load_config(path)
    except SetupError as exc:
        raise _fail(str(exc))


def _optional_path(value: Any) -> Path | None:
    if value in (None, ""):
        return None
    return Path(str(value))


@app.command()
def annotate(
    input_dir: Path | None = typer.Option(None, "--in", help="Input directory containing images."),
    output_dir: Path | None = typer.Option(None, "--out", help="Output directory for processed images."),
    font: Path | None = typer.Option(None, "--font", help="TTF font file for text rendering."),
    max_width: int | None = typer.Option(None, "--max-width", min=0, help="Maximum width for resizing (0=off)."),
    config: Path | None = typer.Option(None, "--config", help="YAML config file."),
    log_level: str | None = typer.Option(None, "--log-level"),
) -> None:
    """Burn a metadata banner below every image in a directory."""
    cfg = _load_config_or_exit(config)
    _setup_logging(log_level or str(cfg.get("log_level", "info")))

    missing = missing_capabilities()
    if missing:
        raise _fail(f"Missing required image support: {', '.join(missing)}")

    try:
        style = normalize_style_dict(cfg.get("style"))
        width_val = int(max_width if max_width is not None else cfg.get("max_width") or 0)
    except (TypeError, ValueError) as exc:
        raise _fail(f"Invalid configuration: {exc}")

    in_dir = input_dir or Path(str(cfg.get("input_dir", "./input")))
    out_dir = output_dir or Path(str(cfg.get("output_dir", "./output")))
    font_path = font or _optional_path(cfg.get("font"))

    LOGGER.info("Input directory: %s", in_dir)
    LOGGER.info("Output directory: %s", out_dir)
    if width_val > 0:
        LOGGER.info("Max width: %dpx", width_val)

    layout = select_text_layout(font_path, style.font_size)
    try:
        summary = process_directory(
            in_dir,
            out_dir,
            layout=layout,
            style=style,
            max_width=width_val or None,
        )
    except SetupError as exc:
        raise _fail(f"Error: {exc}")

    typer.echo(
        f"Processing complete! processed={summary.processed} skipped={summary.skipped} errors={summary.errors}"
    )
    if summary.failures:
        typer.secho("Failures:", fg=typer.colors.RED)
        for r in summary.failures:
            typer.secho(f"  {r.source}: {r.error}", fg=typer.colors.RED)


@app.command("inspect")
def inspect_file(
    file: Path = typer.Argument(..., exists=True, resolve_path=True, dir_okay=False),
    raw: bool = typer.Option(False, "--raw", help="Include the raw tag dictionary."),
) -> None:
    """Print the normalized metadata of one image as JSON."""
    raw_tags = read_tag_dictionary(file)
    metadata = extract_metadata(raw_tags, file_size=file.stat().st_size)
    payload: dict[str, Any] = {"file": str(file), **metadata.to_dict()}
    if raw:
        payload["raw_metadata"] = raw_tags
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2, default=str))


@app.command()
def report(
    input_dir: Path | None = typer.Option(None, "--in", help="Input directory containing images."),
    report_dir: Path | None = typer.Option(None, "--out", help="Directory for the .txt reports."),
    config: Path | None = typer.Option(None, "--config", help="YAML config file."),
    log_level: str | None = typer.Option(None, "--log-level"),
) -> None:
    """Write a plain-text EXIF analysis for every image in a directory."""
    cfg = _load_config_or_exit(config)
    _setup_logging(log_level or str(cfg.get("log_level", "info")))

    in_dir = input_dir or Path(str(cfg.get("input_dir", "./input")))
    out_dir = report_dir or Path(str(cfg.get("report_dir", "./report")))
    if not in_dir.is_dir():
        raise _fail(f"Error: Input directory does not exist: {in_dir}")

    files = discover_inputs(in_dir)
    if not files:
        typer.echo(f"No image files found in {in_dir} directory.")
        raise typer.Exit(0)

    typer.echo(f"Found {len(files)} image(s) to process.")
    written = 0
    errors = 0
    for source in files:
        LOGGER.info("Processing: %s", source.name)
        try:
            output = write_report(source, out_dir)
        except (ImageLoadError, OSError) as exc:
            errors += 1
            LOGGER.error("Error: %s", exc)
            continue
        written += 1
        LOGGER.info("Metadata analysis saved to: %s", output)
    typer.echo(f"Analysis complete! reports={written} errors={errors}")


@app.command()
def check(
    input_dir: Path = typer.Option(Path("input"), "--in", help="Input directory to look at."),
    fonts_dir: Path = typer.Option(Path("fonts"), "--fonts", help="Directory holding TTF fonts."),
) -> None:
    """Report whether this environment can run ``annotate``."""
    typer.echo(f"Pillow version: {PIL.__version__}")
    missing = set(missing_capabilities(REQUIRED_FEATURES))
    for label in REQUIRED_FEATURES.values():
        ok = label not in missing
        typer.secho(f"{'✓' if ok else '✗'} {label}", fg=typer.colors.GREEN if ok else typer.colors.RED)
    missing_optional = set(missing_capabilities(OPTIONAL_FEATURES))
    for label in OPTIONAL_FEATURES.values():
        ok = label not in missing_optional
        typer.secho(f"{'✓' if ok else '⚠'} {label}", fg=typer.colors.GREEN if ok else typer.colors.YELLOW)

    if input_dir.is_dir():
        samples = discover_inputs(input_dir)
        typer.echo(f"✓ Directory '{input_dir}': {len(samples)} image(s)")
        for sample in samples:
            typer.echo(f"  - {sample.name}")
    else:
        typer.echo(f"⚠ Directory '{input_dir}': missing")

    fonts = sorted(fonts_dir.glob("*.ttf")) if fonts_dir.is_dir() else []
    if fonts:
        typer.echo(f"✓ TTF fonts: {len(fonts)} file(s)")
        for font in fonts:
            typer.echo(f"  - {font.name}")
    else:
        typer.echo(f"⚠ TTF fonts: none in '{fonts_dir}' (built-in font will be used)")

    if missing:
        raise typer.Exit(1)


@app.command("init-config")
def init_config(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config file."),
) -> None:
    path = write_default_config(force=force)
    typer.echo(f"Config initialized: {path}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
