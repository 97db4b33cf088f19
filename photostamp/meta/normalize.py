from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping, Sequence
from typing import Any

from photostamp.constants import (
    DEFAULT_LAT_REF,
    DEFAULT_LON_REF,
    DEFAULT_RESOLUTION,
    LENS_TAGS,
)
from photostamp.models import GpsCoordinates, NormalizedMetadata

LOGGER = logging.getLogger(__name__)


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = raw.get(name)
    return value if isinstance(value, Mapping) else {}


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="ignore")
    if isinstance(value, (list, tuple)):
        text_items = [str(v).strip() for v in value if str(v).strip()]
        value = " ".join(text_items)
    text = str(value).replace("\x00", " ").strip()
    text = re.sub(r"\s+", " ", text)
    return text or None


def _pick(section: Mapping[str, Any], candidates: Sequence[str]) -> Any | None:
    for key in candidates:
        value = section.get(key)
        if value in (None, "", " ", b""):
            continue
        return value
    return None


def _to_float(value: Any) -> float | None:
    """Coerce ints, floats, rationals, ``(num, den)`` pairs and ``"num/den"`` text."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    if isinstance(value, tuple) and len(value) == 2:
        return _divide(value[0], value[1])
    numerator = getattr(value, "numerator", None)
    denominator = getattr(value, "denominator", None)
    if numerator is not None and denominator is not None:
        return _divide(numerator, denominator)
    text = _clean_text(value)
    if not text:
        return None
    if "/" in text:
        left, right = text.split("/", 1)
        return _divide(left.strip(), right.strip())
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _divide(numerator: Any, denominator: Any) -> float | None:
    try:
        top = float(numerator)
        bottom = float(denominator)
    except (TypeError, ValueError):
        return None
    if bottom == 0 or not math.isfinite(top) or not math.isfinite(bottom):
        return None
    return top / bottom


def _to_int(value: Any) -> int | None:
    # 多值标签（如 ISOSpeedRatings）取第一个
    if isinstance(value, (list, tuple)) and value:
        value = value[0]
    numeric = _to_float(value)
    if numeric is None:
        return None
    return int(round(numeric))


def _format_number(value: float) -> str:
    return f"{value:g}"


def _format_rational(value: Any) -> str | None:
    """Render a resolution value as ``num/den`` (``300/1``)."""
    if value is None:
        return None
    if isinstance(value, tuple) and len(value) == 2:
        return f"{value[0]}/{value[1]}"
    numerator = getattr(value, "numerator", None)
    denominator = getattr(value, "denominator", None)
    if isinstance(numerator, int) and isinstance(denominator, int):
        return f"{numerator}/{denominator}"
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = float(value)
        if number.is_integer():
            return f"{int(number)}/1"
        return _format_number(number)
    return _clean_text(value)


def format_exposure(value: Any) -> str | None:
    """``1/200s`` for sub-second exposures, ``<n>s`` otherwise; text kept as-is."""
    if value is None:
        return None
    if isinstance(value, str) and not _is_numeric_text(value):
        return _clean_text(value)
    seconds = _to_float(value)
    if seconds is None or seconds <= 0:
        return _clean_text(value)
    if seconds >= 1:
        return f"{_format_number(seconds)}s"
    return f"1/{round(1 / seconds)}s"


def _is_numeric_text(text: str) -> bool:
    try:
        float(text.strip())
    except ValueError:
        return False
    return True


def format_aperture(f_number: Any) -> str | None:
    numeric = _to_float(f_number)
    if numeric is not None:
        return f"f/{_format_number(numeric)}"
    text = _clean_text(f_number)
    return f"f/{text}" if text else None


def _dms_triple(value: Any) -> tuple[Any, Any, Any] | None:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        return None
    if len(value) != 3:
        return None
    return (value[0], value[1], value[2])


def _gps_ref(value: Any, default: str) -> str:
    text = _clean_text(value)
    return text.upper()[:1] if text else default


def dms_to_decimal(values: Sequence[Any], ref: str | None) -> float | None:
    """Convert a degrees/minutes/seconds triple to signed decimal degrees."""
    if isinstance(values, (str, bytes)) or not isinstance(values, Sequence) or len(values) != 3:
        return None
    parts = [_to_float(v) for v in values]
    if any(p is None for p in parts):
        return None
    degrees, minutes, seconds = parts
    decimal = degrees + (minutes / 60.0) + (seconds / 3600.0)  # type: ignore[operator]
    if ref and ref.upper() in {"S", "W"}:
        decimal = -decimal
    return decimal


def gps_to_decimal(gps: GpsCoordinates | None) -> tuple[float, float] | None:
    if gps is None:
        return None
    lat = dms_to_decimal(gps.latitude_dms, gps.lat_ref)
    lon = dms_to_decimal(gps.longitude_dms, gps.lon_ref)
    if lat is None or lon is None:
        return None
    return lat, lon


def _extract_gps(gps_section: Mapping[str, Any]) -> GpsCoordinates | None:
    latitude = _dms_triple(gps_section.get("GPSLatitude"))
    longitude = _dms_triple(gps_section.get("GPSLongitude"))
    if latitude is None or longitude is None:
        return None
    return GpsCoordinates(
        latitude_dms=latitude,
        longitude_dms=longitude,
        lat_ref=_gps_ref(gps_section.get("GPSLatitudeRef"), DEFAULT_LAT_REF),
        lon_ref=_gps_ref(gps_section.get("GPSLongitudeRef"), DEFAULT_LON_REF),
    )


def _extract_orientation(value: Any) -> int:
    code = _to_int(value)
    if code is None or not 1 <= code <= 8:
        return 1
    return code


def _normalize(raw: Mapping[str, Any], file_size: int | None) -> NormalizedMetadata:
    ifd0 = _section(raw, "IFD0")
    exif = _section(raw, "EXIF")
    gps = _section(raw, "GPS")
    computed = _section(raw, "COMPUTED")

    exposure_value = _pick(exif, ["ExposureTime"])
    aperture = _clean_text(_pick(computed, ["ApertureFNumber"]))
    if aperture is None:
        aperture = format_aperture(_pick(exif, ["FNumber"]))

    # 只取原始拍摄时间，DateTimeDigitized / DateTime 不参与
    date_original = _clean_text(_pick(exif, ["DateTimeOriginal"]))

    return NormalizedMetadata(
        camera_make=_clean_text(_pick(ifd0, ["Make"])),
        camera_model=_clean_text(_pick(ifd0, ["Model"])),
        lens=_clean_text(_pick(exif, LENS_TAGS)),
        exposure_raw=_clean_text(exposure_value),
        exposure=format_exposure(exposure_value),
        iso=_to_int(_pick(exif, ["ISOSpeedRatings", "PhotographicSensitivity"])),
        aperture=aperture,
        focal_length=_to_float(_pick(exif, ["FocalLength"])),
        date_original=date_original,
        orientation=_extract_orientation(_pick(ifd0, ["Orientation"])),
        gps=_extract_gps(gps),
        x_resolution=_format_rational(_pick(ifd0, ["XResolution"])) or DEFAULT_RESOLUTION,
        y_resolution=_format_rational(_pick(ifd0, ["YResolution"])) or DEFAULT_RESOLUTION,
        file_size=file_size,
    )


def extract_metadata(raw: Mapping[str, Any] | None, file_size: int | None = None) -> NormalizedMetadata:
    """Normalize a raw nested tag dictionary; never raises."""
    if not isinstance(raw, Mapping):
        return NormalizedMetadata(file_size=file_size)
    try:
        return _normalize(raw, file_size)
    except Exception as exc:
        LOGGER.debug("metadata normalization failed: %s", exc)
        return NormalizedMetadata(file_size=file_size)
