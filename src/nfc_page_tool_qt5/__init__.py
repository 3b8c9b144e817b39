# src/nfc_page_tool_qt5/__init__.py
__version__ = "0.1.0"
