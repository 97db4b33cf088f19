from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from PIL import Image, ImageColor

from photostamp.constants import (
    ALPHA_FORMATS,
    DEFAULT_LAT_REF,
    DEFAULT_LON_REF,
    DEFAULT_RESOLUTION,
    EXIF_DATETIME_FORMAT,
)


@dataclass(slots=True)
class GpsCoordinates:
    latitude_dms: tuple[Any, Any, Any]
    longitude_dms: tuple[Any, Any, Any]
    lat_ref: str = DEFAULT_LAT_REF
    lon_ref: str = DEFAULT_LON_REF

    def to_dict(self) -> dict[str, Any]:
        return {
            "latitude_dms": [str(v) for v in self.latitude_dms],
            "longitude_dms": [str(v) for v in self.longitude_dms],
            "lat_ref": self.lat_ref,
            "lon_ref": self.lon_ref,
        }


@dataclass(slots=True)
class NormalizedMetadata:
    camera_make: str | None = None
    camera_model: str | None = None
    lens: str | None = None
    exposure_raw: str | None = None
    exposure: str | None = None
    iso: int | None = None
    aperture: str | None = None
    focal_length: float | None = None
    date_original: str | None = None
    orientation: int = 1
    gps: GpsCoordinates | None = None
    x_resolution: str = DEFAULT_RESOLUTION
    y_resolution: str = DEFAULT_RESOLUTION
    file_size: int | None = None

    @property
    def capture_dt(self) -> datetime | None:
        if not self.date_original:
            return None
        try:
            return datetime.strptime(self.date_original, EXIF_DATETIME_FORMAT)
        except ValueError:
            return None

    def to_dict(self) -> dict[str, Any]:
        capture_dt = self.capture_dt
        return {
            "camera_make": self.camera_make,
            "camera_model": self.camera_model,
            "lens": self.lens,
            "exposure_raw": self.exposure_raw,
            "exposure": self.exposure,
            "iso": self.iso,
            "aperture": self.aperture,
            "focal_length": self.focal_length,
            "date_original": self.date_original,
            "capture_dt": capture_dt.isoformat() if capture_dt else None,
            "orientation": self.orientation,
            "gps": self.gps.to_dict() if self.gps else None,
            "x_resolution": self.x_resolution,
            "y_resolution": self.y_resolution,
            "file_size": self.file_size,
        }


@dataclass(slots=True)
class PixelBuffer:
    image: Image.Image
    format: str

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    @property
    def supports_alpha(self) -> bool:
        return self.format in ALPHA_FORMATS

    def derive(self, image: Image.Image) -> PixelBuffer:
        return PixelBuffer(image=image, format=self.format)


@dataclass(slots=True)
class OverlayStyle:
    padding: int = 10
    line_height: int = 20
    font_size: int = 12
    text_color: str = "#FFFFFF"
    background: str = "#000000"
    background_opacity: int = 160

    def text_rgba(self) -> tuple[int, int, int, int]:
        r, g, b = ImageColor.getrgb(self.text_color)[:3]
        return (r, g, b, 255)

    def background_rgba(self) -> tuple[int, int, int, int]:
        r, g, b = ImageColor.getrgb(self.background)[:3]
        return (r, g, b, self.background_opacity)


@dataclass(slots=True)
class FileResult:
    source: Path
    status: str  # ok | skipped | failed
    output: Path | None = None
    elapsed: float = 0.0
    error: str | None = None


@dataclass(slots=True)
class BatchSummary:
    results: list[FileResult] = field(default_factory=list)

    def _count(self, status: str) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def processed(self) -> int:
        return self._count("ok")

    @property
    def skipped(self) -> int:
        return self._count("skipped")

    @property
    def errors(self) -> int:
        return self._count("failed")

    @property
    def failures(self) -> list[FileResult]:
        return [r for r in self.results if r.status == "failed"]
