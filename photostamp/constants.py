JPEG_EXTENSIONS = {".jpg", ".jpeg"}
SUPPORTED_EXTENSIONS = JPEG_EXTENSIONS | {".png", ".gif", ".webp"}

# 扩展名 -> 格式标签
FORMAT_BY_EXTENSION = {
    ".jpg": "jpeg",
    ".jpeg": "jpeg",
    ".png": "png",
    ".gif": "gif",
    ".webp": "webp",
}
ALPHA_FORMATS = {"png", "gif", "webp"}

JPEG_QUALITY = 95
PNG_COMPRESS_LEVEL = 9
WEBP_QUALITY = 95

DEFAULT_RESOLUTION = "72/1"
DEFAULT_LAT_REF = "N"
DEFAULT_LON_REF = "E"

EXIF_DATETIME_FORMAT = "%Y:%m:%d %H:%M:%S"
UK_DATETIME_FORMAT = "%d/%m/%Y %H:%M:%S"

LENS_TAGS = ("UndefinedTag:0x0095", "UndefinedTag:0x009A", "LensModel")

ORIENTATION_DESCRIPTIONS = {
    1: "Normal (0°)",
    2: "Mirror horizontal",
    3: "Rotate 180°",
    4: "Mirror vertical",
    5: "Mirror horizontal and rotate 270° CW",
    6: "Rotate 90° CW",
    7: "Mirror horizontal and rotate 90° CW",
    8: "Rotate 270° CW",
}

OVERLAY_LABELS = ("Taken:", "Dimensions:", "File:", "Resolution:", "Lat/Lng:")
