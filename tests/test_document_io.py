import json

import pytest

from core.data_structures import LayerKind, RGBColor
from host.document_io import DocumentFormatError, document_from_dict, load_document, save_document

SAMPLE = {
    "name": "poster",
    "width": 8,
    "height": 8,
    "color_profile": "sRGB",
    "layers": [
        {"name": "Icons", "type": "folder", "mask": {"rect": [0, 0, 4, 4]},
         "layers": [
             {"name": "star", "type": "pixel", "color": [255, 200, 0],
              "rect": [1, 1, 2, 2], "mask": {"rect": [1, 1, 1, 1], "enabled": False}},
             {"name": "bg", "type": "fill", "color": [30, 30, 30], "visible": False},
         ]},
        {"name": "Background", "color": [255, 255, 255]},
    ],
}


def test_document_from_dict():
    document = document_from_dict(SAMPLE)

    assert (document.width, document.height) == (8, 8)
    assert document.icc_profile
    assert [r.name for r in document.walk()] == ["Icons", "star", "bg", "Background"]

    icons = document.find("Icons")
    assert icons.kind == LayerKind.FOLDER
    assert icons.has_mask
    star = document.find("star")
    assert star.mask is not None and not star.mask_enabled
    assert tuple(star.pixels[1, 1]) == (255, 200, 0, 255)
    assert star.pixels[0, 0, 3] == 0
    bg = document.find("bg")
    assert bg.fill_color == RGBColor(30, 30, 30)
    assert bg.visible is False


def test_invalid_documents():
    with pytest.raises(DocumentFormatError):
        document_from_dict({"layers": []})
    with pytest.raises(DocumentFormatError):
        document_from_dict({"width": 4, "height": 4, "layers": [{"name": "x", "type": "smart"}]})
    with pytest.raises(DocumentFormatError):
        document_from_dict({"width": 4, "height": 4, "layers": [{"name": "x", "mask": {}}]})


def test_load_missing_file(tmp_path):
    with pytest.raises(DocumentFormatError):
        load_document(str(tmp_path / "missing.json"))


def test_save_and_reload(tmp_path):
    source = tmp_path / "poster.json"
    source.write_text(json.dumps(SAMPLE), encoding="utf-8")
    document = load_document(str(source))

    target = tmp_path / "saved" / "copy.json"
    target.parent.mkdir()
    assert save_document(document, str(target))
    assert (tmp_path / "saved" / "copy_layers").is_dir()

    reloaded = load_document(str(target))
    assert [r.name for r in reloaded.walk()] == ["Icons", "star", "bg", "Background"]
    assert (reloaded.find("star").pixels == document.find("star").pixels).all()
    assert (reloaded.find("Icons").mask == document.find("Icons").mask).all()
    assert reloaded.find("star").mask_enabled is False
    assert reloaded.icc_profile is not None
