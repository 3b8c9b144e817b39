# NfcPageToolQT5.py
# Launcher for cx_Freeze builds and for running from a checkout.
from nfc_page_tool_qt5.app import run_app

if __name__ == "__main__":
    run_app()
