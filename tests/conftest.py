# tests/conftest.py
# Fake pyscard connection emulating an NTAG/Ultralight tag behind a PC/SC reader.
from __future__ import annotations
from typing import List, Optional

import pytest
from smartcard.Exceptions import CardConnectionException, NoCardException

# PC/SC Part 3 ATRs as reported by ACR122U-class readers
ATR_ULTRALIGHT = bytes.fromhex("3B8F8001804F0CA0000003060300030000000068")
ATR_CLASSIC_1K = bytes.fromhex("3B8F8001804F0CA000000306030001000000006A")

UID = bytes.fromhex("04A1B2C3D4E5F6")

# single short Text record "hi", language "en"
NDEF_TEXT_HI = bytes([0xD1, 0x01, 0x05, 0x54, 0x02, 0x65, 0x6E, 0x68, 0x69])


def make_ntag(ndef: Optional[bytes] = NDEF_TEXT_HI, page_count: int = 45) -> List[bytes]:
    """NTAG213-like memory: UID pages, lock bytes, CC and an NDEF TLV from page 4."""
    pages = [
        bytes([0x04, 0xA1, 0xB2, 0x99]),  # SN0..SN2, BCC0
        bytes([0xC3, 0xD4, 0xE5, 0xF6]),  # SN3..SN6
        bytes([0x54, 0x48, 0x00, 0x00]),  # BCC1, internal, lock bytes
        bytes([0xE1, 0x10, 0x12, 0x00]),  # capability container
    ]
    user = bytearray()
    if ndef is not None:
        user += bytes([0x03, len(ndef)]) + ndef + b"\xFE"
    user_len = (page_count - 4) * 4
    user = bytes(user).ljust(user_len, b"\x00")
    pages += [user[i:i + 4] for i in range(0, user_len, 4)]
    return pages


class FakeConnection:
    """Answers the pseudo-APDUs used by the app (GET DATA, READ BINARY, UPDATE BINARY)."""

    def __init__(self, pages: Optional[List[bytes]] = None, atr: bytes = ATR_ULTRALIGHT,
                 card_present: bool = True, uid_supported: bool = True,
                 lost_at_page: Optional[int] = None, readonly: bool = False):
        self.pages = [bytearray(p) for p in (make_ntag() if pages is None else pages)]
        self.atr = atr
        self.card_present = card_present
        self.uid_supported = uid_supported
        self.lost_at_page = lost_at_page
        self.readonly = readonly
        self.connected = False
        self.disconnected = False
        self.apdus = []

    def connect(self):
        if not self.card_present:
            raise NoCardException("No card present", hresult=-1)
        self.connected = True

    def disconnect(self):
        self.disconnected = True

    def getATR(self):
        return list(self.atr)

    def transmit(self, apdu):
        self.apdus.append(list(apdu))
        cla, ins, p1, p2 = apdu[:4]
        if (cla, ins) == (0xFF, 0xCA):
            if not self.uid_supported:
                return [], 0x6A, 0x81
            return list(UID), 0x90, 0x00
        if (cla, ins) == (0xFF, 0xB0):
            if self.lost_at_page is not None and p2 >= self.lost_at_page:
                raise CardConnectionException("Card was removed")
            if p2 >= len(self.pages):
                return [], 0x63, 0x00
            out = bytearray()
            for i in range(4):
                # reads past the end wrap around to page 0 like a real Ultralight
                out += self.pages[(p2 + i) % len(self.pages)]
            return list(out[:apdu[4]]), 0x90, 0x00
        if (cla, ins) == (0xFF, 0xD6):
            data = bytes(apdu[5:5 + apdu[4]])
            if self.readonly or p2 >= len(self.pages):
                return [], 0x63, 0x00
            self.pages[p2] = bytearray(data)
            return [], 0x90, 0x00
        return [], 0x6D, 0x00


@pytest.fixture
def ntag_conn():
    return FakeConnection()


@pytest.fixture
def use_connection(monkeypatch):
    """Route TagBackend's reader lookup to a given fake connection (or None = no reader)."""
    def _use(conn):
        monkeypatch.setattr("nfc_page_tool_qt5.nfc.backend.connect_reader", lambda index=0: conn)
        return conn
    return _use
