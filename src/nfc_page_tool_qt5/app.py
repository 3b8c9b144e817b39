# src/nfc_page_tool_qt5/app.py
import sys, traceback
from PyQt5 import QtWidgets, QtCore

from .constants import APP_TITLE, UI_VERSION
from .config.settings import load_settings
from .ui.main_window import MainWindow

ERROR_LOG = "qt_error.log"


def run_app():
    QtWidgets.QApplication.setAttribute(QtCore.Qt.AA_EnableHighDpiScaling, True)
    QtWidgets.QApplication.setAttribute(QtCore.Qt.AA_UseHighDpiPixmaps, True)
    app = QtWidgets.QApplication(sys.argv)
    try:
        settings = load_settings()
    except (OSError, ValueError) as e:
        QtWidgets.QMessageBox.critical(None, APP_TITLE, f"Could not load settings:\n{e}")
        sys.exit(1)
    win = MainWindow(APP_TITLE, UI_VERSION, settings)
    win.show()
    sys.exit(app.exec_())


def _global_excepthook(exctype, value, tb):
    text = "".join(traceback.format_exception(exctype, value, tb))
    # Terminal
    print(text, file=sys.stderr)
    # keep a copy next to the working directory
    with open(ERROR_LOG, "a", encoding="utf-8") as f:
        f.write(text + "\n")

sys.excepthook = _global_excepthook
if __name__ == "__main__":
    run_app()
