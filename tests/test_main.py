import json
import os

from host.document_io import load_document
from main import build_parser, run_headless

DOCUMENT = {
    "width": 4,
    "height": 4,
    "layers": [
        {"name": "Icons", "type": "folder", "layers": [
            {"name": "star", "color": [255, 0, 0], "mask": {"rect": [0, 0, 2, 2]}},
            {"name": "Background", "color": [255, 255, 255]},
        ]},
    ],
}


def write_document(tmp_path):
    path = tmp_path / "doc.json"
    path.write_text(json.dumps(DOCUMENT), encoding="utf-8")
    return str(path)


def test_parser_normalizes_format():
    args = build_parser().parse_args(["doc.json", "--export", "out", "--format", "jpg"])
    assert args.format == "JPG"
    assert args.quality == 100
    assert not args.convert


def test_headless_convert_and_export(tmp_path, capsys):
    document_path = write_document(tmp_path)
    out_dir = tmp_path / "out"
    saved = tmp_path / "converted.json"
    args = build_parser().parse_args([
        document_path, "--convert", "--export", str(out_dir), "--save", str(saved)
    ])

    assert run_headless(args) == 0
    assert os.listdir(out_dir) == ["Icons.png"]
    assert "[SUCCESS]" in capsys.readouterr().out

    converted = load_document(str(saved))
    star = converted.find("star")
    assert star.kind.value == "fill"
    assert star.clipped


def test_headless_requires_document(capsys):
    args = build_parser().parse_args(["--convert"])
    assert run_headless(args) == 2
    assert "[ERROR]" in capsys.readouterr().out
