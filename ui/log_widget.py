"""
Log Widget
Displays session log lines with color-coded severity levels
"""

from PyQt6.QtWidgets import QTextEdit
from PyQt6.QtCore import pyqtSlot


class LogWidget(QTextEdit):
    """Read-only, auto-scrolling log view"""

    LEVEL_COLORS = {
        "INFO": "black",
        "WARNING": "orange",
        "ERROR": "red",
        "SUCCESS": "green",
    }

    def __init__(self, parent=None, max_height: int = 160):
        super().__init__(parent)
        self.setReadOnly(True)
        self.setMaximumHeight(max_height)
        self.setUndoRedoEnabled(False)

    @pyqtSlot(str, str)
    def log(self, message: str, level: str = "INFO"):
        """
        Add a log message

        Args:
            message: Message to log
            level: Severity level (INFO, WARNING, ERROR, SUCCESS)
        """
        color = self.LEVEL_COLORS.get(level, "black")
        text = message.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
        self.append(f'<span style="color: {color};">[{level}] {text}</span>')
        self.verticalScrollBar().setValue(self.verticalScrollBar().maximum())
