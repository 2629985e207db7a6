"""Main window for the DDiScan GUI."""

from __future__ import annotations

import logging

from PySide6.QtCore import Slot
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import QHBoxLayout, QLabel, QMainWindow, QPushButton, QVBoxLayout, QWidget

from ..config import ScanConfig
from ..core.connection import ConnectionState
from ..core.models import RangeConfig
from .connection_controller import ConnectionController
from .range_dialog import RangeDialog
from .scan_plot import ScanPlotWidget

_STATUS_OK_STYLE = "QLabel { color: #1b9e1b; font-weight: bold; }"
_STATUS_BAD_STYLE = "QLabel { color: #d62728; font-weight: bold; }"


class MainWindow(QMainWindow):
    """Status line, connect/range buttons, and the scan plot."""

    def __init__(self, config: ScanConfig | None = None) -> None:
        super().__init__()
        self.setWindowTitle("DDiScan")
        self._logger = logging.getLogger(__name__)

        self._config = (config or ScanConfig()).sanitized()
        self._range = RangeConfig(x_max=self._config.x_max, y_max=self._config.y_max)

        self.plot = ScanPlotWidget(self._range, self)
        self.controller = ConnectionController(self._config, self.plot, parent=self)

        self.status_label = QLabel(self)
        self.connect_button = QPushButton("Connect", self)
        self.range_button = QPushButton("Range", self)

        self._build_layout()

        self.connect_button.clicked.connect(self.controller.toggle)
        self.range_button.clicked.connect(self._on_range_clicked)
        self.controller.status_changed.connect(self._on_status_changed)
        self.controller.state_changed.connect(self._on_state_changed)

        self._on_status_changed("Disconnected", False)

    def _build_layout(self) -> None:
        top_row = QHBoxLayout()
        top_row.addWidget(self.status_label, 1)
        top_row.addWidget(self.range_button)
        top_row.addWidget(self.connect_button)

        container = QWidget()
        layout = QVBoxLayout(container)
        layout.addLayout(top_row)
        layout.addWidget(self.plot, 1)
        self.setCentralWidget(container)

    def closeEvent(self, event: QCloseEvent) -> None:
        self.controller.shutdown()
        super().closeEvent(event)

    @Slot(str, bool)
    def _on_status_changed(self, text: str, ok: bool) -> None:
        self.status_label.setText(text)
        self.status_label.setStyleSheet(_STATUS_OK_STYLE if ok else _STATUS_BAD_STYLE)

    @Slot(object)
    def _on_state_changed(self, state: ConnectionState) -> None:
        if state is ConnectionState.DISCONNECTED:
            self.connect_button.setText("Connect")
        else:
            self.connect_button.setText("Disconnect")

    @Slot()
    def _on_range_clicked(self) -> None:
        dialog = RangeDialog(self._range, self)
        if not dialog.exec():
            return
        x_max, y_max = dialog.values()
        self._logger.info("Plot range set to x_max=%s y_max=%s", x_max, y_max)
        self.plot.set_range(x_max, y_max)
