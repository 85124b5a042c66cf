"""
Document I/O
Reads and writes MemoryDocuments as JSON plus PNG side files

Layout of the JSON file::

    {
      "name": "poster",
      "width": 256, "height": 256,
      "color_profile": "sRGB",
      "layers": [
        {"name": "Icons", "type": "folder", "visible": true,
         "mask": {"rect": [0, 0, 128, 128]},
         "layers": [
           {"name": "star", "type": "pixel", "color": [255, 200, 0],
            "rect": [10, 10, 50, 50], "mask": {"image": "star_mask.png"}},
           {"name": "bg", "type": "fill", "color": [30, 30, 30]}
         ]}
      ]
    }

Layers are listed topmost first. Pixel layers are either a solid ``color``
inside ``rect`` or an ``image`` path; masks are a ``rect`` or an ``image``.
Relative paths resolve against the JSON file's directory.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
from PIL import Image, ImageCms

from core.data_structures import LayerKind, RGBColor
from utils.file_loader import load_json_document, save_json_document

from .document import LayerRecord, MemoryDocument


class DocumentFormatError(ValueError):
    """The JSON document is malformed"""


def srgb_profile_bytes() -> bytes:
    profile = ImageCms.createProfile("sRGB")
    return ImageCms.ImageCmsProfile(profile).tobytes()


def _resolve(base_dir: Path, relative: str) -> Path:
    path = Path(relative)
    return path if path.is_absolute() else base_dir / path


def _load_rgba(path: Path, document: MemoryDocument) -> np.ndarray:
    with Image.open(path) as image:
        rgba = image.convert("RGBA")
        if rgba.size != (document.width, document.height):
            canvas = Image.new("RGBA", (document.width, document.height), (0, 0, 0, 0))
            canvas.paste(rgba, (0, 0))
            rgba = canvas
        return np.array(rgba, dtype=np.uint8)


def _load_mask(entry: Dict[str, Any], base_dir: Path, document: MemoryDocument) -> np.ndarray:
    if "rect" in entry:
        mask = np.zeros((document.height, document.width), dtype=np.uint8)
        x, y, w, h = (int(v) for v in entry["rect"])
        mask[y:y + h, x:x + w] = 255
        return mask
    if "image" in entry:
        with Image.open(_resolve(base_dir, entry["image"])) as image:
            gray = image.convert("L").resize((document.width, document.height))
            return np.array(gray, dtype=np.uint8)
    raise DocumentFormatError("Mask needs either 'rect' or 'image'")


def _parse_kind(value: str) -> LayerKind:
    try:
        return LayerKind(str(value).lower())
    except ValueError as exc:
        raise DocumentFormatError(f"Unknown layer type: {value}") from exc


def _add_layers(document: MemoryDocument, entries: List[Dict[str, Any]],
                parent_id: Optional[int], base_dir: Path):
    for entry in entries:
        name = entry.get("name", "Layer")
        kind = _parse_kind(entry.get("type", "pixel"))
        common = {
            "visible": bool(entry.get("visible", True)),
            "clipped": bool(entry.get("clipped", False)),
        }

        if kind == LayerKind.FOLDER:
            record = document.add_folder(name, parent_id=parent_id, **common)
        elif kind == LayerKind.FILL:
            color = RGBColor(*entry.get("color", (0, 0, 0)))
            record = document.add_fill_layer(name, color, parent_id=parent_id, **common)
        elif "image" in entry:
            pixels = _load_rgba(_resolve(base_dir, entry["image"]), document)
            record = document.add_layer(name, kind, parent_id=parent_id, pixels=pixels, **common)
        elif "color" in entry:
            rect = entry.get("rect")
            record = document.add_pixel_layer(
                name, tuple(entry["color"]), tuple(rect) if rect else None,
                parent_id=parent_id, **common,
            )
            record.kind = kind
        else:
            record = document.add_layer(name, kind, parent_id=parent_id, **common)

        if "mask" in entry:
            record.mask = _load_mask(entry["mask"], base_dir, document)
            record.mask_enabled = bool(entry["mask"].get("enabled", True))

        if kind == LayerKind.FOLDER:
            _add_layers(document, entry.get("layers", []), record.layer_id, base_dir)


def document_from_dict(data: Dict[str, Any], base_dir: Path = Path(".")) -> MemoryDocument:
    """Build a MemoryDocument from parsed JSON data."""
    try:
        width = int(data["width"])
        height = int(data["height"])
    except (KeyError, TypeError, ValueError) as exc:
        raise DocumentFormatError("Document needs integer 'width' and 'height'") from exc

    icc_profile = None
    if data.get("color_profile") == "sRGB":
        icc_profile = srgb_profile_bytes()

    document = MemoryDocument(width, height, name=data.get("name", "Untitled"), icc_profile=icc_profile)
    _add_layers(document, data.get("layers", []), None, base_dir)
    return document


def load_document(path: str) -> MemoryDocument:
    """
    Load a document JSON file

    Raises:
        DocumentFormatError: if the file cannot be read or is malformed
    """
    data = load_json_document(path)
    if data is None:
        raise DocumentFormatError(f"Could not read {path}")
    return document_from_dict(data, Path(path).resolve().parent)


def _layer_to_dict(document: MemoryDocument, record: LayerRecord, assets_dir: Path,
                   base_dir: Path) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "name": record.name,
        "type": record.kind.value,
        "visible": record.visible,
    }
    if record.clipped:
        entry["clipped"] = True
    if record.kind == LayerKind.FILL and record.fill_color is not None:
        entry["color"] = list(record.fill_color.as_tuple())
    elif record.pixels is not None:
        image_path = assets_dir / f"layer_{record.layer_id}.png"
        Image.fromarray(record.pixels).save(image_path, "PNG")
        entry["image"] = os.path.relpath(image_path, base_dir)
    if record.mask is not None:
        mask_path = assets_dir / f"mask_{record.layer_id}.png"
        Image.fromarray(record.mask).save(mask_path, "PNG")
        entry["mask"] = {"image": os.path.relpath(mask_path, base_dir), "enabled": record.mask_enabled}
    if record.kind == LayerKind.FOLDER:
        entry["layers"] = [
            _layer_to_dict(document, document.get(child_id), assets_dir, base_dir)
            for child_id in record.child_ids
        ]
    return entry


def save_document(document: MemoryDocument, path: str) -> bool:
    """Write the document as JSON, with pixel data and masks as side PNGs."""
    json_path = Path(path).resolve()
    base_dir = json_path.parent
    assets_dir = base_dir / f"{json_path.stem}_layers"
    assets_dir.mkdir(parents=True, exist_ok=True)

    data: Dict[str, Any] = {
        "name": document.name,
        "width": document.width,
        "height": document.height,
        "layers": [
            _layer_to_dict(document, document.get(layer_id), assets_dir, base_dir)
            for layer_id in document.root_ids
        ],
    }
    if document.icc_profile:
        data["color_profile"] = "sRGB"
    return save_json_document(str(json_path), data)
