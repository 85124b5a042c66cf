"""
Image Writer
Saves rendered images with the requested format, quality and color profile
"""

import os
from typing import Any, Dict, Optional

from PIL import Image

from core.data_structures import ExportOptions

# Formats that store an alpha channel
_ALPHA_FORMATS = {"PNG", "WEBP", "TIFF"}
# Formats Pillow can embed an ICC profile into
_ICC_FORMATS = {"PNG", "JPEG", "WEBP", "TIFF"}


def _png_compress_level(quality: int) -> int:
    """Map a 0-100 quality hint to zlib level 0-9 (lower quality, smaller file)."""
    return max(0, min(9, round(9 * (100 - quality) / 100)))


def flatten_alpha(image: Image.Image, background=(255, 255, 255)) -> Image.Image:
    """Composite an RGBA image onto a solid background."""
    if image.mode != "RGBA":
        return image.convert("RGB")
    base = Image.new("RGB", image.size, background)
    base.paste(image, mask=image.getchannel("A"))
    return base


def save_kwargs(options: ExportOptions, icc_profile: Optional[bytes] = None) -> Dict[str, Any]:
    fmt = options.pillow_format
    kwargs: Dict[str, Any] = {}
    if fmt == "PNG":
        kwargs["compress_level"] = _png_compress_level(options.quality)
    elif fmt in ("JPEG", "WEBP"):
        kwargs["quality"] = options.quality
    elif fmt == "TIFF":
        kwargs["compression"] = "tiff_lzw"

    if options.include_icc_profile and icc_profile and fmt in _ICC_FORMATS:
        kwargs["icc_profile"] = icc_profile
    return kwargs


def write_image(image: Image.Image, path: str, options: ExportOptions,
                icc_profile: Optional[bytes] = None) -> str:
    """
    Write an image to disk

    Args:
        image: Rendered RGBA image
        path: Destination file path
        options: Export options (format, quality, ICC flag)
        icc_profile: Raw ICC profile bytes of the document, if any

    Returns:
        The path written
    """
    fmt = options.pillow_format
    if fmt not in _ALPHA_FORMATS:
        image = flatten_alpha(image)

    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    image.save(path, fmt, **save_kwargs(options, icc_profile))
    return path
