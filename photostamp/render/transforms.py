from __future__ import annotations

import math

from PIL import Image

from photostamp.models import PixelBuffer

# 2/4/5/7 为镜像方向，不处理
_ORIENTATION_TRANSPOSE: dict[int, Image.Transpose] = {
    3: Image.Transpose.ROTATE_180,
    6: Image.Transpose.ROTATE_270,
    8: Image.Transpose.ROTATE_90,
}


def correct_orientation(buffer: PixelBuffer, orientation: int | None) -> PixelBuffer:
    """Rotate pixels upright for orientation codes 3, 6 and 8.

    Code 6 turns the image 90° clockwise and code 8 90° counter-clockwise, both
    swapping width and height. Any other code returns the buffer unchanged.
    """
    method = _ORIENTATION_TRANSPOSE.get(orientation or 1)
    if method is None:
        return buffer
    return buffer.derive(buffer.image.transpose(method))


def resize_to_width(buffer: PixelBuffer, max_width: int | None) -> PixelBuffer:
    if not max_width or max_width <= 0:
        return buffer
    width, height = buffer.size
    if width <= max_width:
        return buffer

    ratio = max_width / float(width)
    new_size = (max_width, max(1, math.floor(height * ratio)))
    source = buffer.image.convert("RGBA") if buffer.supports_alpha else buffer.image
    # RGBA 缩放时 Pillow 会预乘 alpha，透明边缘不会带出底色
    return buffer.derive(source.resize(new_size, Image.Resampling.LANCZOS))
