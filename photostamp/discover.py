from __future__ import annotations

from pathlib import Path

from photostamp.constants import SUPPORTED_EXTENSIONS


def is_supported_image(path: Path) -> bool:
    return path.suffix.lower() in SUPPORTED_EXTENSIONS


def list_directory_files(input_dir: Path) -> list[Path]:
    """Regular files directly inside ``input_dir``, sorted by name."""
    if not input_dir.is_dir():
        return []
    return sorted(p for p in input_dir.iterdir() if p.is_file())


def discover_inputs(input_dir: Path) -> list[Path]:
    return [p for p in list_directory_files(input_dir) if is_supported_image(p)]
