# tests/test_main_window.py
# Window slots driven directly against the fake reader (offscreen Qt, no event loop).
import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
from PyQt5 import QtWidgets  # noqa: E402

from nfc_page_tool_qt5.ui import main_window  # noqa: E402
from nfc_page_tool_qt5.ui.main_window import MainWindow  # noqa: E402
from conftest import ATR_CLASSIC_1K, FakeConnection  # noqa: E402


@pytest.fixture(scope="module")
def qapp():
    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
    yield app


@pytest.fixture
def window(qapp, monkeypatch):
    monkeypatch.setattr(main_window, "list_readers", lambda: ["reader"])
    win = MainWindow("NfcPageToolQT5", "test")
    yield win
    win.reader_timer.stop()
    win.deleteLater()


def _status(win) -> str:
    return win.statusBar().currentMessage()


def test_read_fills_report_and_pages(window, use_connection):
    use_connection(FakeConnection())
    window.on_read()
    assert window.read_text.toPlainText().startswith("Tag ID: 04A1B2C3D4E5F6")
    assert window.combo_page.isEnabled()
    assert window.combo_page.itemText(0) == "Page 4"
    assert window.combo_page.count() == 41
    assert window.btn_write.isEnabled()
    assert _status(window) == "NFC tag read successfully!"


def test_write_confirmation_stays_visible(window, use_connection):
    conn = use_connection(FakeConnection())
    window.on_read()
    window.combo_page.setCurrentIndex(window.combo_page.findText("Page 5"))
    window.write_text.setText("OK")

    window.on_write()

    assert conn.pages[5] == b"OK\x00\x00"
    assert _status(window) == "Successfully wrote 4F4B0000 to page 5"
    # report was refreshed with the new page content
    assert "Page 5: 4F4B0000 (OK..)" in window.read_text.toPlainText()
    # the re-read keeps the selected page
    assert window.combo_page.currentText() == "Page 5"


def test_write_before_scan(window):
    window.on_write()
    assert _status(window) == "No tag detected. Please scan a tag first."


def test_write_on_classic_tag(window, use_connection):
    use_connection(FakeConnection(atr=ATR_CLASSIC_1K))
    window.on_read()
    window.on_write()
    assert _status(window) == "This tag doesn't support MifareUltralight writing"
