"""
Workers
QObject wrappers that run the layer tool sessions off the UI thread
"""

from typing import Any, Dict, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from core.cancellation import CancellationToken
from core.layer_tools import LayerToolsService


class _SessionWorker(QObject):
    """Base class for the session workers: re-emits pipeline callbacks as Qt signals.

    The token is created with the worker, on the UI thread, so a cancel
    issued before run() starts still reaches the session.
    """

    logMessage = pyqtSignal(str, str)
    progressChanged = pyqtSignal(int)
    finished = pyqtSignal(bool, str)

    def __init__(self, service: LayerToolsService):
        super().__init__()
        self.service = service
        self.token = CancellationToken()

    def _on_log(self, message: str, level: str = "INFO"):
        self.logMessage.emit(message, level)

    def _on_progress(self, increment: int):
        self.progressChanged.emit(increment)

    def _on_complete(self, success: bool, message: Optional[str]):
        self.finished.emit(success, message or "")

    def cancel(self):
        self.token.request()


class ConversionWorker(_SessionWorker):
    """Runs convert_masks_to_fills."""

    def run(self):
        try:
            self.service.convert_masks_to_fills(
                self._on_log, self._on_progress, self._on_complete, token=self.token
            )
        except Exception as exc:  # pragma: no cover - surfaced in the UI
            self.finished.emit(False, str(exc))


class ExportWorker(_SessionWorker):
    """Runs export_folders_as_images with the given option overrides."""

    def __init__(self, service: LayerToolsService, options: Optional[Dict[str, Any]] = None):
        super().__init__(service)
        self.options = options

    def run(self):
        try:
            self.service.export_folders_as_images(
                self._on_log, self._on_progress, self._on_complete, self.options,
                token=self.token,
            )
        except Exception as exc:  # pragma: no cover - surfaced in the UI
            self.finished.emit(False, str(exc))
