from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from photostamp.decoders.image_codec import load_image, save_image
from photostamp.discover import is_supported_image, list_directory_files
from photostamp.errors import ImageLoadError, ImageSaveError, SetupError
from photostamp.meta.normalize import extract_metadata
from photostamp.meta.reader import read_tag_dictionary
from photostamp.models import BatchSummary, FileResult, OverlayStyle, PixelBuffer
from photostamp.render.banner import compose_overlay
from photostamp.render.transforms import correct_orientation, resize_to_width
from photostamp.render.typography import TextLayout

LOGGER = logging.getLogger(__name__)


def annotate_buffer(
    buffer: PixelBuffer,
    raw_tags: Mapping[str, Any] | None,
    *,
    source_name: str,
    file_size: int | None,
    layout: TextLayout,
    style: OverlayStyle,
    max_width: int | None = None,
) -> PixelBuffer:
    """Run extract -> orient -> resize -> overlay on an already decoded image."""
    metadata = extract_metadata(raw_tags, file_size=file_size)
    if metadata.orientation != 1:
        buffer = correct_orientation(buffer, metadata.orientation)
    if max_width:
        buffer = resize_to_width(buffer, max_width)
    return compose_overlay(buffer, metadata, source_name, layout, style)


def process_file(
    source: Path,
    output_dir: Path,
    *,
    layout: TextLayout,
    style: OverlayStyle,
    max_width: int | None = None,
) -> FileResult:
    t0 = time.perf_counter()
    if not is_supported_image(source):
        LOGGER.warning("Skipping: %s (unsupported format)", source.name)
        return FileResult(source=source, status="skipped")

    LOGGER.info("Processing: %s", source.name)
    output = output_dir / source.name
    try:
        buffer = load_image(source)
        annotated = annotate_buffer(
            buffer,
            read_tag_dictionary(source),
            source_name=source.name,
            file_size=source.stat().st_size,
            layout=layout,
            style=style,
            max_width=max_width,
        )
        save_image(annotated, output)
    except (ImageLoadError, ImageSaveError) as exc:
        LOGGER.error("Error: %s", exc)
        return FileResult(source=source, status="failed", error=str(exc), elapsed=time.perf_counter() - t0)
    except Exception as exc:
        LOGGER.exception("Error: unexpected failure processing %s", source.name)
        return FileResult(source=source, status="failed", error=str(exc), elapsed=time.perf_counter() - t0)

    elapsed = time.perf_counter() - t0
    LOGGER.info("Saved: %s (%.2fs)", output.name, elapsed)
    return FileResult(source=source, status="ok", output=output, elapsed=elapsed)


def prepare_directories(input_dir: Path, output_dir: Path) -> None:
    if not input_dir.is_dir():
        raise SetupError(f"Input directory does not exist: {input_dir}")
    if input_dir.resolve() == output_dir.resolve():
        raise SetupError(f"Output directory must differ from input directory: {output_dir}")
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise SetupError(f"Cannot create directory: {output_dir} ({exc})") from exc


def process_directory(
    input_dir: Path,
    output_dir: Path,
    *,
    layout: TextLayout,
    style: OverlayStyle,
    max_width: int | None = None,
) -> BatchSummary:
    prepare_directories(input_dir, output_dir)
    summary = BatchSummary()
    for source in list_directory_files(input_dir):
        summary.results.append(
            process_file(source, output_dir, layout=layout, style=style, max_width=max_width)
        )
    return summary
