# src/nfc_page_tool_qt5/constants.py
APP_TITLE = "NfcPageToolQT5"
UI_VERSION = "V0.1"

# Type 2 Tag geometry
PAGE_SIZE = 4
PAGES_PER_READ = 4          # READ returns 16 bytes = 4 pages
CC_PAGE = 3                 # capability container
FIRST_USER_PAGE = 4
# READ / UPDATE BINARY address pages with a single byte (P2)
MAX_PAGE_INDEX = 0xFF

# Upper bound for page probing when the real tag size is unknown
# (NTAG213 has 45 pages, NTAG215 135). Overridable via [probe] max_pages,
# never above MAX_PAGE_INDEX + 1.
PROBE_MAX_PAGES = 200

PLACEHOLDER_PAGE = "Scan a tag first"

TECH_NFCA = "NfcA"
TECH_MIFARE_ULTRALIGHT = "MifareUltralight"
TECH_MIFARE_CLASSIC = "MifareClassic"
TECH_NDEF = "Ndef"
