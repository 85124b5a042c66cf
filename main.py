"""
Layer Batch Tools
Main entry point for the application

Opens the GUI by default. With --convert and/or --export the tools run
headless against the given document and print their log to stdout.
"""

import argparse
import sys

from core.data_structures import SUPPORTED_EXPORT_FORMATS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Batch mask conversion and folder export")
    parser.add_argument("document", nargs="?", help="Layered document (.json)")
    parser.add_argument("--convert", action="store_true",
                        help="Convert masked layers into clipped solid fills")
    parser.add_argument("--export", metavar="DIR", help="Export each folder as an image into DIR")
    parser.add_argument("--format", default="PNG", choices=sorted(SUPPORTED_EXPORT_FORMATS),
                        type=str.upper, help="Export image format")
    parser.add_argument("--quality", type=int, default=100, help="Export quality (0-100)")
    parser.add_argument("--no-icc", action="store_true", help="Do not embed the ICC profile")
    parser.add_argument("--save", metavar="PATH", help="Write the modified document to PATH")
    return parser


def run_headless(args) -> int:
    """Run the requested sessions without a GUI. Returns the exit code."""
    from core.layer_tools import LayerToolsService
    from host.document_io import DocumentFormatError, load_document, save_document
    from host.memory_host import MemoryHost

    if not args.document:
        print("[ERROR] A document is required in headless mode")
        return 2
    try:
        document = load_document(args.document)
    except DocumentFormatError as e:
        print(f"[ERROR] {e}")
        return 1

    host = MemoryHost(document)
    service = LayerToolsService(host)
    exit_code = 0

    if args.convert:
        result = service.convert_masks_to_fills()
        if not result.success:
            exit_code = 1

    if args.export:
        result = service.export_folders_as_images(options={
            "directory": args.export,
            "format": args.format,
            "quality": args.quality,
            "include_icc_profile": not args.no_icc,
        })
        if not result.success:
            exit_code = 1

    if args.save and not save_document(host.document, args.save):
        exit_code = 1
    return exit_code


def main():
    """Main entry point"""
    args = build_parser().parse_args()
    if args.convert or args.export:
        sys.exit(run_headless(args))

    from PyQt6.QtWidgets import QApplication
    from ui.main_window import LayerToolsWindow

    app = QApplication(sys.argv)
    app.setStyle('Fusion')

    window = LayerToolsWindow(args.document)
    window.show()

    sys.exit(app.exec())


if __name__ == '__main__':
    main()
