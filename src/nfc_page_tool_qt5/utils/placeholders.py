# src/nfc_page_tool_qt5/utils/placeholders.py
from typing import Sequence

from PyQt5 import QtWidgets, QtCore


def set_placeholder(combo: QtWidgets.QComboBox, text: str):
    """Show a single disabled, non-selectable item and disable the combo."""
    combo.clear()
    combo.addItem(text)
    m = combo.model()
    # disable item 0 (placeholder)
    m.setData(m.index(0, 0), 0, QtCore.Qt.UserRole - 1)
    combo.setCurrentIndex(0)
    combo.setEnabled(False)


def set_items_or_placeholder(combo: QtWidgets.QComboBox, items: Sequence[str], placeholder: str) -> bool:
    """Replace the combo entries; falls back to the placeholder when `items` is empty.
    Returns True if real entries were set."""
    if not items:
        set_placeholder(combo, placeholder)
        return False
    combo.blockSignals(True)
    combo.clear()
    combo.addItems(list(items))
    combo.setCurrentIndex(0)
    combo.blockSignals(False)
    combo.setEnabled(True)
    return True
