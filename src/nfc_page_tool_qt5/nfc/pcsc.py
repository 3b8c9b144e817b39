# src/nfc_page_tool_qt5/nfc/pcsc.py
# Minimal PC/SC helpers for detecting readers, connecting, reading ATR/UID and
# talking to Ultralight/NTAG pages through the reader's pseudo-APDUs.
from __future__ import annotations
import time
from typing import List, Optional, Tuple

from smartcard.System import readers
from smartcard.CardConnection import CardConnection

from ..constants import (
    MAX_PAGE_INDEX,
    PAGE_SIZE,
    PAGES_PER_READ,
    TECH_NFCA,
    TECH_MIFARE_ULTRALIGHT,
    TECH_MIFARE_CLASSIC,
)

SW_OK = (0x90, 0x00)

# PC/SC Part 3 contactless ATR: 3B 8F 80 01 | 80 4F 0C | A0 00 00 03 06 | SS | NN NN | 00 00 00 00 | TCK
PCSC_RID = bytes([0xA0, 0x00, 0x00, 0x03, 0x06])
STD_ISO14443A_3 = 0x03

# card names from the PC/SC Part 3 supplement
_ULTRALIGHT_NAMES = {
    0x0003,  # Mifare Ultralight (NTAG21x report this too)
    0x003A,  # Mifare Ultralight C
}
_CLASSIC_NAMES = {0x0001, 0x0002, 0x0026}  # 1K, 4K, Mini


def list_readers() -> List:
    """Return available PC/SC readers."""
    try:
        return readers()
    except Exception:
        return []


def connect_reader(index: int = 0) -> Optional[CardConnection]:
    """Create connection object to the reader at `index` (not yet connected)."""
    rlist = list_readers()
    if not rlist or index >= len(rlist):
        return None
    return rlist[index].createConnection()


def wait_for_card(index: int = 0, timeout_s: float = 30.0, poll_interval_s: float = 0.5) -> Optional[CardConnection]:
    """Poll the reader until a card is present or timeout."""
    conn = connect_reader(index)
    if conn is None:
        return None
    deadline = time.time() + timeout_s
    while True:
        try:
            conn.connect()  # will raise until a card is present
            return conn
        except Exception:
            if time.time() >= deadline:
                return None
            time.sleep(poll_interval_s)


def disconnect_quietly(conn) -> None:
    try:
        conn.disconnect()
    except Exception:
        pass


def read_atr(conn: CardConnection) -> bytes:
    """Return ATR bytes of the connected card (already connected)."""
    atr = conn.getATR()
    return bytes(atr) if atr else b""


def transmit(conn, apdu: list) -> Tuple[bytes, int, int]:
    """Send one APDU; pyscard exceptions propagate to the caller."""
    data, sw1, sw2 = conn.transmit(apdu)
    return bytes(data or b""), sw1, sw2


def read_uid(conn: CardConnection) -> Tuple[Optional[bytes], int, int]:
    """
    Read the card UID via the PC/SC GET DATA pseudo-APDU:
    FF CA 00 00 00  -> returns UID, SW1, SW2
    Not all readers/cards support this. Handle gracefully.
    """
    try:
        data, sw1, sw2 = transmit(conn, [0xFF, 0xCA, 0x00, 0x00, 0x00])
        if (sw1, sw2) == SW_OK and data:
            return data, sw1, sw2
        return None, sw1, sw2
    except Exception:
        return None, 0x6F, 0x00  # 6F00 = generic error


def uid_from_pages(page0: Optional[bytes], page1: Optional[bytes]) -> Optional[bytes]:
    """7-byte UID of a Type 2 Tag: SN0..SN2 from page 0 (byte 3 is BCC0) + SN3..SN6 from page 1."""
    if not page0 or not page1 or len(page0) < 3 or len(page1) < 4:
        return None
    return bytes(page0[:3]) + bytes(page1[:4])


def _check_page(page: int):
    if not 0 <= page <= MAX_PAGE_INDEX:
        raise ValueError(f"Page {page} out of range 0..{MAX_PAGE_INDEX}")


def cmd_read_pages(page: int) -> list:
    """READ BINARY of 16 bytes (4 pages) starting at `page`."""
    _check_page(page)
    return [0xFF, 0xB0, 0x00, page, PAGES_PER_READ * PAGE_SIZE]


def cmd_write_page(page: int, data4: bytes) -> list:
    """UPDATE BINARY of exactly one 4-byte page."""
    _check_page(page)
    return [0xFF, 0xD6, 0x00, page, PAGE_SIZE] + list(data4)


# --- technology detection ---

def parse_contactless_atr(atr: bytes) -> Optional[Tuple[int, int]]:
    """Return (standard, card_name) from a PC/SC Part 3 contactless ATR, or None."""
    atr = bytes(atr or b"")
    pos = atr.find(PCSC_RID)
    if pos < 0 or pos + len(PCSC_RID) + 3 > len(atr):
        return None
    base = pos + len(PCSC_RID)
    standard = atr[base]
    card_name = (atr[base + 1] << 8) | atr[base + 2]
    return standard, card_name


def technologies_from_atr(atr: bytes) -> List[str]:
    """Map a contactless ATR to technology names (NfcA, MifareUltralight, ...).
    Unknown ATRs yield an empty list."""
    parsed = parse_contactless_atr(atr)
    if parsed is None:
        return []
    standard, card_name = parsed
    techs: List[str] = []
    if standard == STD_ISO14443A_3:
        techs.append(TECH_NFCA)
    if card_name in _ULTRALIGHT_NAMES:
        techs.append(TECH_MIFARE_ULTRALIGHT)
    elif card_name in _CLASSIC_NAMES:
        techs.append(TECH_MIFARE_CLASSIC)
    return techs
