import pytest
from PIL import Image

from core.data_structures import ExportOptions, RGBColor
from host.image_writer import _png_compress_level, flatten_alpha, save_kwargs, write_image


def test_defaults():
    options = ExportOptions()
    assert options.format == "PNG"
    assert options.quality == 100
    assert options.include_icc_profile
    assert options.directory is None


def test_format_is_normalized():
    options = ExportOptions(format="jpg")
    assert options.format == "JPG"
    assert options.extension == "jpg"
    assert options.pillow_format == "JPEG"


@pytest.mark.parametrize("kwargs", [
    {"format": "GIF"},
    {"quality": 101},
    {"quality": -1},
    {"quality": "high"},
    {"quality": True},
])
def test_invalid_options(kwargs):
    with pytest.raises(ValueError):
        ExportOptions(**kwargs)


def test_merged():
    options = ExportOptions().merged({"format": "webp", "quality": 70})
    assert (options.format, options.quality) == ("WEBP", 70)
    assert ExportOptions().merged(None) == ExportOptions()
    with pytest.raises(ValueError):
        ExportOptions().merged({"dpi": 300})


def test_rgb_color_range():
    assert str(RGBColor(1, 2, 3)) == "RGB(1, 2, 3)"
    with pytest.raises(ValueError):
        RGBColor(256, 0, 0)


def test_png_compress_level():
    assert _png_compress_level(100) == 0
    assert _png_compress_level(0) == 9
    assert _png_compress_level(50) in (4, 5)


def test_save_kwargs_icc_handling():
    profile = b"icc"
    assert save_kwargs(ExportOptions(format="JPEG", quality=80), profile) == {
        "quality": 80, "icc_profile": profile
    }
    assert "icc_profile" not in save_kwargs(ExportOptions(include_icc_profile=False), profile)
    assert "icc_profile" not in save_kwargs(ExportOptions(format="BMP"), profile)


def test_flatten_alpha_onto_white():
    image = Image.new("RGBA", (2, 2), (0, 0, 0, 0))
    image.putpixel((0, 0), (255, 0, 0, 255))
    flat = flatten_alpha(image)
    assert flat.mode == "RGB"
    assert flat.getpixel((0, 0)) == (255, 0, 0)
    assert flat.getpixel((1, 1)) == (255, 255, 255)


def test_write_image_creates_directory(tmp_path):
    path = tmp_path / "nested" / "out.bmp"
    write_image(Image.new("RGBA", (2, 2), (0, 0, 255, 128)), str(path), ExportOptions(format="BMP"))
    with Image.open(path) as image:
        assert image.format == "BMP"
