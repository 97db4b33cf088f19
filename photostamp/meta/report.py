from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from PIL import Image, UnidentifiedImageError

from photostamp.constants import ORIENTATION_DESCRIPTIONS
from photostamp.errors import ImageLoadError
from photostamp.meta.normalize import extract_metadata, format_exposure
from photostamp.meta.reader import read_tag_dictionary

LOGGER = logging.getLogger(__name__)

KEY_FIELDS: dict[str, list[str]] = {
    "IFD0": ["Make", "Model", "DateTime", "Orientation", "XResolution", "YResolution", "ResolutionUnit"],
    "EXIF": [
        "DateTimeOriginal",
        "DateTimeDigitized",
        "ExposureTime",
        "FNumber",
        "ISOSpeedRatings",
        "FocalLength",
        "FocalLengthIn35mmFilm",
        "Flash",
        "WhiteBalance",
        "ExposureMode",
        "ExposureProgram",
        "MeteringMode",
        "LightSource",
        "SensingMethod",
        "FileSource",
        "SceneType",
        "CustomRendered",
        "ExposureBiasValue",
        "MaxApertureValue",
        "SubjectDistance",
        "DigitalZoomRatio",
        "GainControl",
        "Contrast",
        "Saturation",
        "Sharpness",
        "SubjectDistanceRange",
        "LensModel",
        "UndefinedTag:0x0095",
        "UndefinedTag:0x009A",
    ],
    "COMPUTED": ["ApertureFNumber", "Width", "Height"],
    "GPS": ["GPSLatitude", "GPSLongitude", "GPSAltitude", "GPSTimeStamp", "GPSDateStamp"],
}


def _value_text(value: Any) -> str:
    if isinstance(value, bytes):
        return f"<{len(value)} bytes>"
    if isinstance(value, (list, tuple)):
        return ", ".join(_value_text(v) for v in value)
    return str(value).replace("\x00", "").strip()


def format_tag_tree(data: Mapping[str, Any], indent: int = 0) -> str:
    lines: list[str] = []
    prefix = "  " * indent
    for key, value in data.items():
        if isinstance(value, Mapping):
            lines.append(f"{prefix}{key}:")
            nested = format_tag_tree(value, indent + 1)
            if nested:
                lines.append(nested)
        else:
            lines.append(f"{prefix}{key}: {_value_text(value)}")
    return "\n".join(lines)


def _heading(title: str, underline: str = "=") -> list[str]:
    return [title, underline * len(title)]


def build_metadata_report(
    source: Path,
    raw: Mapping[str, Any],
    *,
    dimensions: tuple[int, int],
    file_size: int,
    image_format: str | None,
) -> str:
    if not raw:
        return f"No EXIF data found in: {source}\n"

    meta = extract_metadata(raw, file_size=file_size)
    mime = Image.MIME.get(image_format or "", "application/octet-stream")
    lines: list[str] = [*_heading("EXIF Metadata Analysis"), ""]
    lines.append(f"File: {source}")
    lines.append(f"File Size: {file_size:,} bytes")
    lines.append(f"Dimensions: {dimensions[0]} x {dimensions[1]} pixels")
    lines.append(f"Image Type: {image_format or 'unknown'} ({mime})")
    lines.append("")

    lines.extend(_heading("ALL EXIF DATA:"))
    lines.append(format_tag_tree(raw))
    lines.append("")

    lines.extend(_heading("KEY METADATA EXTRACTED:"))
    for section_name, fields in KEY_FIELDS.items():
        section = raw.get(section_name)
        if not isinstance(section, Mapping):
            continue
        lines.append("")
        lines.extend(_heading(f"{section_name}:", "-"))
        for field in fields:
            if field in section:
                lines.append(f"  {field}: {_value_text(section[field])}")
    lines.append("")

    lines.extend(_heading("CAMERA INFORMATION:"))
    if meta.camera_make:
        lines.append(f"Camera Make: {meta.camera_make}")
    if meta.camera_model:
        lines.append(f"Camera Model: {meta.camera_model}")
    lines.append("")

    lines.extend(_heading("EXPOSURE SETTINGS:"))
    if meta.exposure:
        lines.append(f"Exposure Time: {meta.exposure}")
    if meta.aperture:
        lines.append(f"F-Number: {meta.aperture}")
    if meta.iso is not None:
        lines.append(f"ISO: {meta.iso}")
    if meta.focal_length is not None:
        lines.append(f"Focal Length: {meta.focal_length:g}mm")
    exif = raw.get("EXIF") if isinstance(raw.get("EXIF"), Mapping) else {}
    focal_35 = exif.get("FocalLengthIn35mmFilm")
    if focal_35 is not None:
        lines.append(f"Focal Length (35mm): {_value_text(focal_35)}mm")
    lines.append("")

    lines.extend(_heading("LENS INFORMATION:"))
    if meta.lens:
        lines.append(f"Lens: {meta.lens}")
    lines.append("")

    lines.extend(_heading("DATE/TIME INFORMATION:"))
    if meta.date_original:
        lines.append(f"Date/Time Original: {meta.date_original}")
    ifd0 = raw.get("IFD0") if isinstance(raw.get("IFD0"), Mapping) else {}
    if ifd0.get("DateTime"):
        lines.append(f"Date/Time Modified: {_value_text(ifd0['DateTime'])}")
    lines.append("")

    lines.extend(_heading("ORIENTATION:"))
    if "Orientation" in ifd0:
        lines.append(f"Orientation: {_value_text(ifd0['Orientation'])}")
        description = ORIENTATION_DESCRIPTIONS.get(meta.orientation)
        if description and meta.orientation == ifd0.get("Orientation"):
            lines.append(f"Orientation Description: {description}")
    lines.append("")

    lines.extend(_heading("GPS INFORMATION:"))
    gps = raw.get("GPS") if isinstance(raw.get("GPS"), Mapping) else {}
    for key, value in gps.items():
        lines.append(f"{key}: {_value_text(value)}")
    return "\n".join(lines) + "\n"


def write_report(source: Path, report_dir: Path) -> Path:
    """Write ``<stem>.txt`` with the metadata analysis of ``source``."""
    try:
        with Image.open(source) as image:
            dimensions = image.size
            image_format = image.format
    except (OSError, UnidentifiedImageError) as exc:
        raise ImageLoadError(f"cannot read image: {exc}") from exc

    raw = read_tag_dictionary(source)
    text = build_metadata_report(
        source,
        raw,
        dimensions=dimensions,
        file_size=source.stat().st_size,
        image_format=image_format,
    )
    report_dir.mkdir(parents=True, exist_ok=True)
    output = report_dir / f"{source.stem}.txt"
    output.write_text(text, encoding="utf-8")
    LOGGER.debug("report for %s: %d bytes", source.name, len(text))
    return output
