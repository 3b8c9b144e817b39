# src/nfc_page_tool_qt5/ui/main_window.py
from __future__ import annotations

import sys
import traceback
from typing import Optional

from PyQt5 import QtWidgets, QtGui, QtCore

from ..config.settings import Settings
from ..constants import PAGE_SIZE, PLACEHOLDER_PAGE
from ..utils.placeholders import set_placeholder, set_items_or_placeholder
from ..nfc.backend import TagBackend, TagScan
from ..nfc.codec import bytes_to_hex
from ..nfc.errors import NoReaderError, NoTagError, TagError
from ..nfc.pcsc import list_readers
from ..nfc.presence import QtPresenceBridge, PresenceDispatch
from ..nfc.report import build_report
from .page_options import page_options, parse_page_option


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self, title: str, version: str, settings: Optional[Settings] = None):
        super().__init__()
        self.setWindowTitle(f"{title} - {version}")
        self.resize(760, 680)

        self.settings = settings or Settings()
        self.backend = TagBackend(self.settings, on_log=self.log)
        self.reader_available = False
        self.tag_scanned = False
        self.tag_writable = False

        # === central UI ===
        central = QtWidgets.QWidget()
        self.setCentralWidget(central)
        layout = QtWidgets.QVBoxLayout(central)
        layout.setSpacing(10)
        layout.setContentsMargins(10, 10, 10, 10)

        # === tag report ===
        self.read_text = QtWidgets.QPlainTextEdit()
        self.read_text.setReadOnly(True)
        self.read_text.setPlaceholderText("Place a tag on the reader …")
        self.read_text.setFont(QtGui.QFontDatabase.systemFont(QtGui.QFontDatabase.FixedFont))
        layout.addWidget(self.read_text, 3)

        # === write row ===
        write_box = QtWidgets.QGroupBox("Write one page (4 ASCII characters)")
        write_row = QtWidgets.QHBoxLayout(write_box)
        self.write_text = QtWidgets.QLineEdit()
        self.write_text.setMaxLength(PAGE_SIZE)
        self.write_text.setPlaceholderText("ABCD")
        self.combo_page = QtWidgets.QComboBox()
        self.combo_page.setMinimumWidth(120)
        self.btn_write = QtWidgets.QPushButton("WRITE NFC")
        write_row.addWidget(self.write_text, 1)
        write_row.addWidget(self.combo_page)
        write_row.addWidget(self.btn_write)
        layout.addWidget(write_box)

        # === buttons ===
        btn_row = QtWidgets.QHBoxLayout()
        layout.addLayout(btn_row)
        self.btn_read = QtWidgets.QPushButton("READ NFC")
        self.btn_refresh = QtWidgets.QToolButton()
        self.btn_refresh.setText("Refresh")
        self.btn_refresh.setToolTip("Refresh reader status")
        btn_row.addStretch()
        btn_row.addWidget(self.btn_read)
        btn_row.addWidget(self.btn_refresh)
        btn_row.addStretch()

        # === log area ===
        log_row = QtWidgets.QHBoxLayout()
        layout.addLayout(log_row, 1)
        self.output = QtWidgets.QPlainTextEdit()
        self.output.setReadOnly(True)
        self.btn_clear_log = QtWidgets.QToolButton()
        self.btn_clear_log.setText("Clear Log")
        log_row.addWidget(self.output, 1)
        log_row.addWidget(self.btn_clear_log, 0, QtCore.Qt.AlignTop)

        self.statusBar().showMessage("Ready")
        set_placeholder(self.combo_page, PLACEHOLDER_PAGE)

        # signals
        self.btn_read.clicked.connect(self.on_read)
        self.btn_write.clicked.connect(self.on_write)
        self.btn_refresh.clicked.connect(self.refresh_reader_status)
        self.btn_clear_log.clicked.connect(self.clear_log)

        # reader monitor
        self.refresh_reader_status()
        self.reader_timer = QtCore.QTimer(self)
        self.reader_timer.setInterval(self.settings.presence_refresh_ms)
        self.reader_timer.timeout.connect(self.refresh_reader_status)
        self.reader_timer.start()

        # tag dispatch, enabled while the window is shown
        self._presence_bridge = QtPresenceBridge()
        self._presence_bridge.tagArrived.connect(self.on_tag_arrived)
        self._presence_bridge.tagRemoved.connect(self.on_tag_removed)
        self._presence = PresenceDispatch(self._presence_bridge)

        self._update_actions()

    # ---------- basic helpers ----------
    def clear_log(self):
        self.output.clear()

    def log(self, msg: str):
        self.output.appendPlainText(msg)

    def log_exception(self, prefix: str = "[ERROR]"):
        """Append full traceback of the active exception to the log window and stderr."""
        exc = traceback.format_exc()
        self.log(f"{prefix}\n{exc}")
        print(exc, file=sys.stderr)

    def notify(self, msg: str, long: bool = False):
        """Short user notice in the status bar."""
        self.statusBar().showMessage(msg, 5000 if long else 2000)

    def refresh_reader_status(self):
        available = bool(list_readers())
        if available != self.reader_available:
            self.log("[INFO] Reader connected." if available else "[WARN] No PC/SC reader found.")
        self.reader_available = available
        self._update_actions()

    def _update_actions(self):
        self.btn_read.setEnabled(self.reader_available)
        self.btn_write.setEnabled(self.reader_available and self.tag_scanned)

    # ---------- dispatch ----------
    def showEvent(self, event: QtGui.QShowEvent):
        super().showEvent(event)
        try:
            self._presence.enable()
        except Exception as e:
            self.log(f"[WARN] Tag monitor unavailable: {e}")

    def hideEvent(self, event: QtGui.QHideEvent):
        self._presence.disable()
        super().hideEvent(event)

    @QtCore.pyqtSlot()
    def on_tag_arrived(self):
        self.log("[INFO] Tag detected.")
        self.on_read()

    @QtCore.pyqtSlot()
    def on_tag_removed(self):
        self.log("[INFO] Tag removed.")

    # ---------- NFC: READ ----------
    def on_read(self):
        if self._scan_and_show():
            self.notify("NFC tag read successfully!")

    def _scan_and_show(self) -> bool:
        """Scan the tag and show the report. Returns False if the scan failed."""
        try:
            scan = self.backend.scan()
        except (NoReaderError, NoTagError) as e:
            self.log(f"[INFO] {e}")
            self.notify(str(e))
            return False
        except TagError as e:
            self.log(f"[ERROR] Read failed: {e}")
            self.notify(f"Read failed: {e}", long=True)
            return False
        except Exception as e:
            self.log(f"[ERROR] Read failed: {e}")
            self.log_exception()
            return False
        self.show_scan(scan)
        return True

    def show_scan(self, scan: TagScan):
        self.read_text.setPlainText(build_report(scan))
        self.tag_scanned = True
        self.tag_writable = scan.supports_ultralight
        previous = self.combo_page.currentText()
        if scan.probe is not None:
            self.log(f"[INFO] Read {scan.probe.count} pages")
            if set_items_or_placeholder(
                self.combo_page,
                page_options(scan.probe.count, self.settings.first_user_page),
                PLACEHOLDER_PAGE,
            ):
                idx = self.combo_page.findText(previous)
                if idx >= 0:
                    self.combo_page.setCurrentIndex(idx)
        else:
            set_placeholder(self.combo_page, PLACEHOLDER_PAGE)
        self._update_actions()

    # ---------- NFC: WRITE ----------
    def on_write(self):
        if not self.tag_scanned:
            self.notify("No tag detected. Please scan a tag first.")
            return
        if not self.tag_writable:
            self.notify("This tag doesn't support MifareUltralight writing")
            return
        try:
            page = parse_page_option(self.combo_page.currentText())
        except ValueError:
            self.notify("Select a page to write.")
            return

        try:
            data = self.backend.write_page(page, self.write_text.text())
        except (TagError, ValueError) as e:
            self.log(f"[ERROR] Write failed: {e}")
            self.notify(f"Write failed: {e}", long=True)
            return
        except Exception as e:
            self.log(f"[ERROR] Write failed: {e}")
            self.log_exception()
            return

        # show the updated memory
        self._scan_and_show()
        self.notify(f"Successfully wrote {bytes_to_hex(data)} to page {page}")

    # ---------- close ----------
    def closeEvent(self, event: QtGui.QCloseEvent):
        try:
            self._presence.disable()
        except Exception:
            pass
        finally:
            super().closeEvent(event)
