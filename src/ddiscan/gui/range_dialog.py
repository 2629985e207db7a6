from __future__ import annotations

from typing import Optional

from PySide6.QtWidgets import QDialog, QDialogButtonBox, QFormLayout, QLineEdit, QWidget

from ..core.models import RangeConfig


def parse_bound(text: str, fallback: float) -> float:
    """Return *text* as a float, or *fallback* when it does not parse."""
    try:
        return float(text.strip())
    except ValueError:
        return fallback


class RangeDialog(QDialog):
    """Ask for new axis maxima. Values are applied as typed, without validation."""

    def __init__(self, current: RangeConfig, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Set Graph Range")
        self._current = current

        form = QFormLayout(self)
        self.x_edit = QLineEdit(str(int(current.x_max)), self)
        self.x_edit.setPlaceholderText("X max (distance in mm)")
        self.y_edit = QLineEdit(str(int(current.y_max)), self)
        self.y_edit.setPlaceholderText("Y max (amplitude ADC)")
        form.addRow("X max (mm):", self.x_edit)
        form.addRow("Y max (ADC):", self.y_edit)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel, self)
        buttons.button(QDialogButtonBox.Ok).setText("Apply")
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        form.addRow(buttons)

    def values(self) -> tuple[float, float]:
        return (
            parse_bound(self.x_edit.text(), self._current.x_max),
            parse_bound(self.y_edit.text(), self._current.y_max),
        )


__all__ = ["RangeDialog", "parse_bound"]
