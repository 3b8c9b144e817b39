# freeze_setup.py
# cx_Freeze setup for Windows (.exe) and macOS (.app)
import sys
from pathlib import Path
from cx_Freeze import setup, Executable

APP_NAME = "NfcPageToolQT5"
VERSION = "0.1.0"
BASE_DIR = Path(__file__).parent

# Files/folders that must go into the bundle
include_files = [
    ("src/nfc_page_tool_qt5/config/nfc_page_tool.ini", "lib/nfc_page_tool_qt5/config/nfc_page_tool.ini"),
]

build_exe_options = {
    "includes": [
        "PyQt5.QtCore",
        "PyQt5.QtGui",
        "PyQt5.QtWidgets",
        # --- smartcard (pyscard) ---
        "smartcard",
        "smartcard.Exceptions",
        "smartcard.System",
        "smartcard.scard",
        "smartcard.CardMonitoring",
    ],
    "packages": ["nfc_page_tool_qt5"],
    "excludes": ["tkinter", "unittest", "tests"],
    "include_files": include_files,
    "optimize": 1,
}

if sys.platform == "win32":
    base = "Win32GUI"
    icon = BASE_DIR / "packaging" / "windows" / "app.ico"
else:
    base = None
    icon = BASE_DIR / "packaging" / "macos" / "app.icns"

executables = [
    Executable(
        script="NfcPageToolQT5.py",
        base=base,
        target_name=APP_NAME,
        icon=str(icon) if icon.exists() else None,
    )
]

bdist_mac_options = {
    "bundle_name": APP_NAME,
    "iconfile": str(icon) if icon.exists() else None,
}

setup(
    name=APP_NAME,
    version=VERSION,
    description="PyQt5 tool to read and write NFC tag pages via PC/SC",
    options={
        "build_exe": build_exe_options,
        "bdist_mac": bdist_mac_options,
    },
    executables=executables,
)
