"""
Main Window
Mask converter and folder exporter panels for an open layered document
"""

import os
from typing import Optional

from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QGroupBox,
    QPushButton, QLabel, QFileDialog, QMessageBox, QProgressBar,
    QComboBox, QSpinBox, QCheckBox, QFormLayout
)
from PyQt6.QtCore import QThread

from core.data_structures import SUPPORTED_EXPORT_FORMATS, ExportOptions
from core.layer_tools import LayerToolsService
from core.tree_walker import flatten_folders, flatten_leaves
from host.document_io import DocumentFormatError, load_document, save_document
from host.memory_host import MemoryHost
from utils.settings import SettingsManager
from .log_widget import LogWidget
from .workers import ConversionWorker, ExportWorker


class LayerToolsWindow(QMainWindow):
    """Main application window"""

    def __init__(self, document_path: Optional[str] = None):
        super().__init__()
        self.settings_manager = SettingsManager()
        self.host = MemoryHost()
        self.service = LayerToolsService(self.host)
        self.document_path: Optional[str] = None

        self.worker_thread: Optional[QThread] = None
        self.worker = None
        self.active_panel: Optional[str] = None

        self.init_ui()
        self._apply_export_options(self.settings_manager.load_export_options())

        geometry = self.settings_manager.get_window_geometry()
        if geometry is not None:
            self.restoreGeometry(geometry)

        path = document_path or self.settings_manager.get_last_document()
        if path and os.path.exists(path):
            self.open_document(path)

    # ------------------------------------------------------------------ #
    # UI construction
    # ------------------------------------------------------------------ #
    def init_ui(self):
        """Initialize the user interface"""
        self.setWindowTitle("Layer Batch Tools")
        self.setGeometry(100, 100, 560, 720)

        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        main_layout = QVBoxLayout(central_widget)

        # Document toolbar
        toolbar_layout = QHBoxLayout()
        self.document_label = QLabel("Document: None")
        toolbar_layout.addWidget(self.document_label)
        toolbar_layout.addStretch()

        open_btn = QPushButton("Open...")
        open_btn.clicked.connect(self.browse_document)
        toolbar_layout.addWidget(open_btn)

        self.save_btn = QPushButton("Save As...")
        self.save_btn.clicked.connect(self.save_document_as)
        self.save_btn.setEnabled(False)
        toolbar_layout.addWidget(self.save_btn)
        main_layout.addLayout(toolbar_layout)

        main_layout.addWidget(self._build_converter_group())
        main_layout.addWidget(self._build_exporter_group())

    def _build_converter_group(self) -> QGroupBox:
        group = QGroupBox("Mask Converter")
        layout = QVBoxLayout(group)

        button_row = QHBoxLayout()
        self.convert_btn = QPushButton("Convert Masked Layers")
        self.convert_btn.clicked.connect(self.start_mask_conversion)
        button_row.addWidget(self.convert_btn)
        self.cancel_convert_btn = QPushButton("Cancel")
        self.cancel_convert_btn.clicked.connect(self.cancel_mask_conversion)
        self.cancel_convert_btn.setEnabled(False)
        button_row.addWidget(self.cancel_convert_btn)
        layout.addLayout(button_row)

        self.converter_status = QLabel("Idle")
        layout.addWidget(self.converter_status)
        self.converter_progress = QProgressBar()
        layout.addWidget(self.converter_progress)
        self.converter_log = LogWidget()
        layout.addWidget(self.converter_log)
        return group

    def _build_exporter_group(self) -> QGroupBox:
        group = QGroupBox("Folder Exporter")
        layout = QVBoxLayout(group)

        form = QFormLayout()
        self.format_combo = QComboBox()
        self.format_combo.addItems(sorted(SUPPORTED_EXPORT_FORMATS))
        form.addRow("Format:", self.format_combo)
        self.quality_spin = QSpinBox()
        self.quality_spin.setRange(0, 100)
        form.addRow("Quality:", self.quality_spin)
        self.icc_check = QCheckBox("Embed ICC profile")
        form.addRow("", self.icc_check)
        directory_row = QHBoxLayout()
        self.directory_label = QLabel("Ask on export")
        directory_row.addWidget(self.directory_label, 1)
        browse_dir_btn = QPushButton("Browse...")
        browse_dir_btn.clicked.connect(self.browse_export_directory)
        directory_row.addWidget(browse_dir_btn)
        form.addRow("Output:", directory_row)
        layout.addLayout(form)

        button_row = QHBoxLayout()
        self.export_btn = QPushButton("Export Folders")
        self.export_btn.clicked.connect(self.start_export)
        button_row.addWidget(self.export_btn)
        self.cancel_export_btn = QPushButton("Cancel")
        self.cancel_export_btn.clicked.connect(self.cancel_export)
        self.cancel_export_btn.setEnabled(False)
        button_row.addWidget(self.cancel_export_btn)
        layout.addLayout(button_row)

        self.exporter_status = QLabel("Idle")
        layout.addWidget(self.exporter_status)
        self.exporter_progress = QProgressBar()
        layout.addWidget(self.exporter_progress)
        self.exporter_log = LogWidget()
        layout.addWidget(self.exporter_log)
        return group

    def _apply_export_options(self, options: ExportOptions):
        index = self.format_combo.findText(options.format)
        if index >= 0:
            self.format_combo.setCurrentIndex(index)
        self.quality_spin.setValue(options.quality)
        self.icc_check.setChecked(options.include_icc_profile)
        self.last_export_directory = options.directory
        if options.directory:
            self.directory_label.setText(options.directory)

    def _current_export_options(self, directory: Optional[str]) -> ExportOptions:
        return ExportOptions(
            format=self.format_combo.currentText(),
            quality=self.quality_spin.value(),
            include_icc_profile=self.icc_check.isChecked(),
            directory=directory,
        )

    # ------------------------------------------------------------------ #
    # Documents
    # ------------------------------------------------------------------ #
    def browse_document(self):
        filename, _ = QFileDialog.getOpenFileName(
            self, "Open Layered Document", "", "Layer Document (*.json)"
        )
        if filename:
            self.open_document(filename)

    def open_document(self, path: str):
        try:
            document = load_document(path)
        except (DocumentFormatError, OSError) as e:
            QMessageBox.warning(self, "Error", f"Could not open document:\n{e}")
            return
        self.host.open_document(document)
        self.document_path = path
        self.document_label.setText(f"Document: {os.path.basename(path)}")
        self.save_btn.setEnabled(True)
        self.settings_manager.set_last_document(path)

    def save_document_as(self):
        if not self.host.has_document():
            return
        filename, _ = QFileDialog.getSaveFileName(
            self, "Save Layered Document", self.document_path or "", "Layer Document (*.json)"
        )
        if filename and save_document(self.host.document, filename):
            self.document_path = filename
            self.document_label.setText(f"Document: {os.path.basename(filename)}")

    # ------------------------------------------------------------------ #
    # Sessions
    # ------------------------------------------------------------------ #
    def start_mask_conversion(self):
        if self.worker_thread is not None:
            return
        self.converter_log.clear()
        self.converter_progress.setValue(0)
        if self.host.has_document():
            self.converter_progress.setMaximum(max(1, len(flatten_leaves(self.host))))
        self.converter_status.setText("Processing...")
        self._start_worker("converter", ConversionWorker(self.service), self.converter_log,
                           self.converter_progress)

    def cancel_mask_conversion(self):
        if self.active_panel == "converter" and self.worker:
            self.worker.cancel()
            self.converter_status.setText("Cancelling...")

    def browse_export_directory(self):
        directory = QFileDialog.getExistingDirectory(
            self, "Select Destination Folder", self.last_export_directory or ""
        )
        if directory:
            self.last_export_directory = directory
            self.directory_label.setText(directory)

    def start_export(self):
        if self.worker_thread is not None:
            return
        directory = self.last_export_directory
        if not directory:
            directory = QFileDialog.getExistingDirectory(self, "Select Destination Folder", "")
            if not directory:
                self.exporter_log.log("Export cancelled: No output directory selected.", "WARNING")
                return

        options = self._current_export_options(directory)
        self.settings_manager.save_export_options(options)
        self.last_export_directory = directory
        self.directory_label.setText(directory)

        self.exporter_log.clear()
        self.exporter_progress.setValue(0)
        if self.host.has_document():
            self.exporter_progress.setMaximum(max(1, len(flatten_folders(self.host))))
        self.exporter_status.setText("Processing...")
        worker = ExportWorker(self.service, {"directory": directory, "format": options.format,
                                             "quality": options.quality,
                                             "include_icc_profile": options.include_icc_profile})
        self._start_worker("exporter", worker, self.exporter_log, self.exporter_progress)

    def cancel_export(self):
        if self.active_panel == "exporter" and self.worker:
            self.worker.cancel()
            self.exporter_status.setText("Cancelling...")

    def _start_worker(self, panel: str, worker, log_widget: LogWidget, progress: QProgressBar):
        self.active_panel = panel
        self.worker = worker
        self.worker_thread = QThread(self)
        self.worker.moveToThread(self.worker_thread)

        self.worker_thread.started.connect(self.worker.run)
        self.worker.logMessage.connect(log_widget.log)
        self.worker.progressChanged.connect(lambda inc: progress.setValue(progress.value() + inc))
        self.worker.finished.connect(self.on_session_finished)
        self.worker.finished.connect(self.worker_thread.quit)
        self.worker_thread.finished.connect(self._cleanup_worker_thread)
        self._set_running(True)
        self.worker_thread.start()

    def on_session_finished(self, success: bool, message: str):
        label = self.converter_status if self.active_panel == "converter" else self.exporter_status
        if success:
            label.setText("Conversion complete" if self.active_panel == "converter" else "Export complete")
        else:
            label.setText(f"Error: {message}")
        self._set_running(False)

    def _cleanup_worker_thread(self):
        """Release worker/thread once the session exits."""
        if self.worker:
            self.worker.deleteLater()
            self.worker = None
        if self.worker_thread:
            self.worker_thread.deleteLater()
            self.worker_thread = None
        self.active_panel = None

    def _set_running(self, running: bool):
        self.convert_btn.setEnabled(not running)
        self.export_btn.setEnabled(not running)
        self.save_btn.setEnabled(not running and self.host.has_document())
        self.cancel_convert_btn.setEnabled(running and self.active_panel == "converter")
        self.cancel_export_btn.setEnabled(running and self.active_panel == "exporter")

    def closeEvent(self, event):
        """Handle window close"""
        if self.worker_thread is not None:
            QMessageBox.warning(self, "Layer Batch Tools",
                                "Please wait for the current operation to finish.")
            event.ignore()
            return
        self.settings_manager.set_window_geometry(self.saveGeometry())
        event.accept()
