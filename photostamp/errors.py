from __future__ import annotations


class SetupError(RuntimeError):
    """Raised when a run cannot start at all (missing input root, codec, config)."""


class ImageLoadError(RuntimeError):
    pass


class ImageSaveError(RuntimeError):
    pass
