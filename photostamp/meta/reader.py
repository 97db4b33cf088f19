from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from PIL import ExifTags, Image

from photostamp.constants import JPEG_EXTENSIONS

LOGGER = logging.getLogger(__name__)

_SUB_IFD_TAGS = {int(ExifTags.IFD.Exif), int(ExifTags.IFD.GPSInfo)}


def _tag_name(tag_id: int, names: dict[int, str]) -> str:
    return names.get(tag_id) or f"UndefinedTag:0x{tag_id:04X}"


def _ratio_to_float(value: Any) -> float:
    if isinstance(value, tuple) and len(value) == 2:
        numerator, denominator = value
        if denominator == 0:
            return 0.0
        return float(numerator) / float(denominator)
    numerator = getattr(value, "numerator", None)
    denominator = getattr(value, "denominator", None)
    if numerator is not None and denominator not in (None, 0):
        return float(numerator) / float(denominator)
    return float(value)


def _computed_section(image: Image.Image, exif_section: dict[str, Any]) -> dict[str, Any]:
    computed: dict[str, Any] = {"Width": image.width, "Height": image.height}
    f_number = exif_section.get("FNumber")
    if f_number is not None:
        try:
            computed["ApertureFNumber"] = f"f/{_ratio_to_float(f_number):.1f}"
        except (TypeError, ValueError, ZeroDivisionError):
            pass
    return computed


def read_tag_dictionary(path: Path) -> dict[str, dict[str, Any]]:
    """Read the EXIF profile of a JPEG into ``section -> tag -> value``.

    Sections are ``IFD0``, ``EXIF``, ``GPS`` and ``COMPUTED``; only the ones
    with data are present. Non-JPEG inputs and unreadable files give ``{}``.
    """
    if path.suffix.lower() not in JPEG_EXTENSIONS:
        return {}
    sections: dict[str, dict[str, Any]] = {}
    try:
        with Image.open(path) as image:
            exif = image.getexif()
            if not exif:
                return {}

            ifd0 = {
                _tag_name(tag_id, ExifTags.TAGS): value
                for tag_id, value in exif.items()
                if tag_id not in _SUB_IFD_TAGS
            }
            exif_ifd = {
                _tag_name(tag_id, ExifTags.TAGS): value
                for tag_id, value in exif.get_ifd(ExifTags.IFD.Exif).items()
            }
            gps_ifd = {
                _tag_name(tag_id, ExifTags.GPSTAGS): value
                for tag_id, value in exif.get_ifd(ExifTags.IFD.GPSInfo).items()
            }
            if ifd0:
                sections["IFD0"] = ifd0
            if exif_ifd:
                sections["EXIF"] = exif_ifd
            if gps_ifd:
                sections["GPS"] = gps_ifd
            sections["COMPUTED"] = _computed_section(image, exif_ifd)
    except Exception as exc:
        LOGGER.debug("EXIF read failed for %s: %s", path, exc)
        return {}
    return sections
