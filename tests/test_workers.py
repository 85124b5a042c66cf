import pytest

pytest.importorskip("PyQt6.QtCore")

from core.layer_tools import LayerToolsService  # noqa: E402
from ui.workers import ConversionWorker, ExportWorker  # noqa: E402


def test_cancel_before_run_is_not_lost(masked_host, masked_document):
    worker = ConversionWorker(LayerToolsService(masked_host))
    finished = []
    worker.finished.connect(lambda success, message: finished.append((success, message)))

    worker.cancel()
    worker.run()

    assert finished == [(False, "Cancelled by user.")]
    assert masked_document.find("star").kind.value == "pixel"


def test_export_worker_forwards_signals(folder_host, tmp_path):
    worker = ExportWorker(LayerToolsService(folder_host), {"directory": str(tmp_path)})
    finished = []
    increments = []
    levels = []
    worker.finished.connect(lambda success, message: finished.append(success))
    worker.progressChanged.connect(increments.append)
    worker.logMessage.connect(lambda message, level: levels.append(level))

    worker.run()

    assert finished == [True]
    assert increments == [1, 1, 1]
    assert "SUCCESS" in levels
