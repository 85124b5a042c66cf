"""
Folder Export
Exports every folder group of the document as its own image file

Each folder is processed as one unit: the visibility of the whole document is
captured, everything outside the folder is hidden, the image is written and
the captured visibility is restored, whether the export succeeded or not.
"""

from __future__ import annotations

import os
import re
from typing import Optional

from utils.session_log import ProgressCallback, SessionLog, emit_progress

from .cancellation import CancellationToken
from .data_structures import ExportOptions, ExportReport, LayerNode, SessionResult, SessionStatus
from .host_interface import DocumentHost
from .state_snapshot import capture_visibility
from .tree_walker import ancestor_ids, descendant_ids, flatten_all, flatten_folders

CANCELLED_MESSAGE = "Cancelled by user."
NO_FOLDERS_MESSAGE = "no folders"

_ILLEGAL_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|]')


def sanitize_filename(name: str) -> str:
    """Replace the characters ``\\ / : * ? " < > |`` with underscores."""
    return _ILLEGAL_FILENAME_CHARS.sub("_", name)


def build_export_path(directory: str, folder_name: str, options: ExportOptions) -> str:
    return os.path.join(directory, f"{sanitize_filename(folder_name)}.{options.extension}")


class FolderExportEngine:
    """Isolates and exports each folder in discovery order."""

    def __init__(
        self,
        host: DocumentHost,
        options: ExportOptions,
        token: Optional[CancellationToken] = None,
        log: Optional[SessionLog] = None,
        progress_callback: ProgressCallback = None,
    ):
        self.host = host
        self.options = options
        self.token = token or CancellationToken()
        self.log = log or SessionLog()
        self.progress_callback = progress_callback
        self.report = ExportReport()

    def run(self) -> SessionResult:
        """Export every folder to ``options.directory``."""
        if not self.host.has_document():
            self.log.error("No document open.")
            return SessionResult(SessionStatus.NO_DOCUMENT, "No document is open.")
        directory = self.options.directory
        if not directory:
            self.log.error("Export cancelled: No output directory selected.")
            return SessionResult(SessionStatus.FAILED, "No output directory selected.")

        try:
            self.log.info("Getting folder list...")
            folders = flatten_folders(self.host)
            if not folders:
                self.log.error("No folder layers found in document.")
                return SessionResult(SessionStatus.NO_TARGETS, NO_FOLDERS_MESSAGE)

            os.makedirs(directory, exist_ok=True)
            self.log.info(f"Found {len(folders)} folders to export.")

            total = len(folders)
            for index, folder in enumerate(folders):
                if self.token.is_cancelled:
                    self.log.warning("Export cancelled by user.")
                    return SessionResult(SessionStatus.CANCELLED, CANCELLED_MESSAGE)

                self.log.info(f"Processing folder {index + 1}/{total}: {folder.name}")
                self.export_folder(folder, directory)
                emit_progress(self.progress_callback, 1)
        except Exception as exc:
            self.log.error(f"Error in export process: {exc}")
            return SessionResult(SessionStatus.FAILED, str(exc))

        exported = len(self.report.exported_paths)
        if self.report.failed_folders:
            self.log.warning(
                f"Export finished: {exported} of {total} folders exported, "
                f"failed: {', '.join(self.report.failed_folders)}"
            )
        else:
            self.log.success(f"Export completed successfully ({exported} files).")
        return SessionResult(SessionStatus.COMPLETED)

    def export_folder(self, folder: LayerNode, directory: str) -> Optional[str]:
        """
        Export a single folder with everything else hidden

        Args:
            folder: Folder to export
            directory: Output directory

        Returns:
            The written path, or None if the export failed
        """
        snapshot = None
        try:
            snapshot = capture_visibility(
                self.host, [node.layer_id for node in flatten_all(self.host)]
            )
            path = build_export_path(directory, folder.name, self.options)
            with self.host.modal("Export Folder"):
                self.isolate(folder)
                self.host.export_image(path, self.options)
            self.report.exported_paths.append(path)
            self.log.success(f"Successfully exported: {os.path.basename(path)}")
            return path
        except Exception as exc:
            self.report.failed_folders.append(folder.name)
            self.log.error(f"Error exporting {folder.name}: {exc}")
            return None
        finally:
            if snapshot is not None:
                with self.host.modal("Restore Visibility"):
                    snapshot.restore(self.host, self.log)

    def isolate(self, folder: LayerNode):
        """Hide every layer outside the folder, show the folder and its parents."""
        inside = set(descendant_ids(self.host, folder.layer_id))
        shown = {folder.layer_id, *ancestor_ids(self.host, folder.layer_id)}
        for node in flatten_all(self.host):
            if node.layer_id in inside:
                continue
            self.host.set_visible(node.layer_id, node.layer_id in shown)
