"""
Layer Tools
Entry points used by the GUI and the command line

Each call starts one session: a fresh cancellation token, the pipeline run,
and a single completion callback. Only one session may run at a time.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Mapping, Optional

from utils.session_log import CompleteCallback, LogCallback, ProgressCallback, SessionLog

from .cancellation import CancellationToken
from .conversion_pipeline import ConversionPipeline
from .data_structures import ExportOptions, ExportReport, SessionResult, SessionStatus
from .folder_export import FolderExportEngine
from .host_interface import DocumentHost

BUSY_MESSAGE = "Another operation is already running."

DirectoryProvider = Optional[Callable[[], Optional[str]]]


class LayerToolsService:
    """Runs the conversion and export sessions against a document host."""

    def __init__(
        self,
        host: DocumentHost,
        default_options: Optional[ExportOptions] = None,
        directory_provider: DirectoryProvider = None,
    ):
        self.host = host
        self.default_options = default_options or ExportOptions()
        self.directory_provider = directory_provider
        self._conversion_token = CancellationToken()
        self._export_token = CancellationToken()
        self._busy = threading.Lock()
        self.last_export_report: Optional[ExportReport] = None

    # ------------------------------------------------------------------ #
    # Mask conversion
    # ------------------------------------------------------------------ #
    def convert_masks_to_fills(
        self,
        on_log: LogCallback = None,
        on_progress: ProgressCallback = None,
        on_complete: CompleteCallback = None,
        token: Optional[CancellationToken] = None,
    ) -> SessionResult:
        """
        Convert every masked layer of the active document into a fill layer

        A caller that needs to cancel before the session starts (the GUI
        does) passes its own token; otherwise a fresh one is created.
        """
        log = SessionLog(on_log)
        if not self._busy.acquire(blocking=False):
            log.error(BUSY_MESSAGE)
            return self._finish(SessionResult(SessionStatus.FAILED, BUSY_MESSAGE), on_complete)
        try:
            self._conversion_token = token or CancellationToken()
            pipeline = ConversionPipeline(
                self.host,
                token=self._conversion_token,
                log=log,
                progress_callback=on_progress,
            )
            result = pipeline.run()
        except Exception as exc:
            log.error(f"Error: {exc}")
            result = SessionResult(SessionStatus.FAILED, str(exc))
        finally:
            self._busy.release()
        return self._finish(result, on_complete)

    def cancel_conversion(self):
        self._conversion_token.request()
        print("Conversion process cancellation requested")

    # ------------------------------------------------------------------ #
    # Folder export
    # ------------------------------------------------------------------ #
    def export_folders_as_images(
        self,
        on_log: LogCallback = None,
        on_progress: ProgressCallback = None,
        on_complete: CompleteCallback = None,
        options: Optional[Mapping[str, Any]] = None,
        token: Optional[CancellationToken] = None,
    ) -> SessionResult:
        """
        Export each folder group as a separate image

        Args:
            on_log: Receives ``(message, level)`` lines
            on_progress: Receives one increment per folder processed
            on_complete: Receives ``(success, message)``
            options: Overrides merged over the default ExportOptions
            token: Cancellation token for this session (a fresh one if None)
        """
        log = SessionLog(on_log)
        if not self._busy.acquire(blocking=False):
            log.error(BUSY_MESSAGE)
            return self._finish(SessionResult(SessionStatus.FAILED, BUSY_MESSAGE), on_complete)
        try:
            self._export_token = token or CancellationToken()
            result = self._run_export(log, on_progress, options)
        except Exception as exc:
            log.error(f"Error in export process: {exc}")
            result = SessionResult(SessionStatus.FAILED, str(exc))
        finally:
            self._busy.release()
        return self._finish(result, on_complete)

    def _run_export(self, log: SessionLog, on_progress: ProgressCallback, options) -> SessionResult:
        if not self.host.has_document():
            log.error("No document open.")
            return SessionResult(SessionStatus.NO_DOCUMENT, "No document is open.")

        try:
            merged = self.default_options.merged(options)
        except ValueError as exc:
            log.error(f"Invalid export options: {exc}")
            return SessionResult(SessionStatus.FAILED, str(exc))

        if not merged.directory and self.directory_provider:
            directory = self.directory_provider()
            if directory:
                merged = merged.merged({"directory": str(directory)})

        engine = FolderExportEngine(
            self.host,
            merged,
            token=self._export_token,
            log=log,
            progress_callback=on_progress,
        )
        result = engine.run()
        self.last_export_report = engine.report
        return result

    def cancel_export(self):
        self._export_token.request()
        print("Export process cancellation requested.")

    @property
    def is_busy(self) -> bool:
        return self._busy.locked()

    @staticmethod
    def _finish(result: SessionResult, on_complete: CompleteCallback) -> SessionResult:
        if on_complete:
            on_complete(result.success, result.message)
        return result
