from __future__ import annotations

from typing import Optional

import pyqtgraph as pg
from PySide6.QtWidgets import QVBoxLayout, QWidget

from ..core.models import Batch, RangeConfig
from ..tools.debug import time_block

SERIES_LABEL = "Amplitude (ADC)"


class MillimeterAxis(pg.AxisItem):
    """Bottom axis that labels ticks as whole millimetres."""

    def tickStrings(self, values, scale, spacing):  # noqa: N802 - Qt naming
        return [f"{int(value)} mm" for value in values]


class ScanPlotWidget(QWidget):
    """
    Distance/amplitude plot for one batch at a time.

    Each batch replaces the previous trace. Axes start at zero and end at the
    configured :class:`RangeConfig` bounds; pan and zoom stay enabled.
    """

    def __init__(self, range_config: Optional[RangeConfig] = None, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._range = range_config or RangeConfig()

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self._plot = pg.PlotWidget(self, axisItems={"bottom": MillimeterAxis(orientation="bottom")})
        self._plot.setBackground("w")
        self._plot.showGrid(x=True, y=True, alpha=0.3)
        self._plot.setLabel("bottom", "Distance")
        self._plot.setLabel("left", SERIES_LABEL)
        self._plot.setTitle("X: Distance (mm)   |   Y: Amplitude (ADC)")
        self._plot.addLegend()
        self._plot.getAxis("right").hide()
        layout.addWidget(self._plot)

        self._curve = self._plot.plot([], [], pen=pg.mkPen("b", width=2), name=SERIES_LABEL)
        self._last_sequence: Optional[int] = None
        self.set_range(self._range.x_max, self._range.y_max)

    @property
    def last_sequence(self) -> Optional[int]:
        return self._last_sequence

    def render(self, batch: Batch) -> None:
        with time_block(f"ScanPlotWidget.render #{batch.sequence}"):
            x, y = batch.to_arrays()
            self._curve.setData(x, y)
        self._last_sequence = batch.sequence

    def clear(self) -> None:
        self._curve.setData([], [])
        self._last_sequence = None

    def set_range(self, x_max: float, y_max: float) -> None:
        self._range.set_range(x_max, y_max)
        self._plot.enableAutoRange(x=False, y=False)
        self._plot.setXRange(0.0, self._range.x_max, padding=0.0)
        self._plot.setYRange(0.0, self._range.y_max, padding=0.0)


__all__ = ["MillimeterAxis", "ScanPlotWidget"]
