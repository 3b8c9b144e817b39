# src/nfc_page_tool_qt5/nfc/ndef.py
# NDEF message parsing for Type 2 Tags: TLV lookup in page memory + record headers.
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..constants import PAGE_SIZE, FIRST_USER_PAGE

# only well-known Text records are decoded; everything else is shown raw
TNF_WELL_KNOWN = 0x01
RTD_TEXT = b"T"

# --- record header flags ---
FLAG_MB = 0x80
FLAG_ME = 0x40
FLAG_CF = 0x20
FLAG_SR = 0x10
FLAG_IL = 0x08
TNF_MASK = 0x07

# --- Type 2 Tag TLVs ---
TLV_NULL = 0x00
TLV_NDEF = 0x03
TLV_TERMINATOR = 0xFE

CC_MAGIC = 0xE1


class NdefFormatError(ValueError):
    """NDEF bytes are truncated or malformed."""


@dataclass(frozen=True)
class NdefRecord:
    tnf: int
    type: bytes
    payload: bytes
    id: bytes = b""
    message_begin: bool = False
    message_end: bool = False
    chunked: bool = False


def is_ndef_formatted(cc_page: Optional[bytes]) -> bool:
    """True if the capability container page starts with the NDEF magic 0xE1."""
    return bool(cc_page) and len(cc_page) >= 1 and cc_page[0] == CC_MAGIC


def find_ndef_tlv(mem: bytes) -> Optional[Tuple[int, int]]:
    """Scan a Type 2 Tag TLV area for the NDEF Message TLV (0x03).
    Returns (offset_of_value, ndef_len) or None if there is none.
    Supports short length (1 byte) and extended length (0xFF + 2 bytes big-endian)."""
    i = 0
    n = len(mem)
    while i < n:
        t = mem[i]
        if t == TLV_NULL:
            i += 1
            continue
        if t == TLV_TERMINATOR:
            return None
        if i + 1 >= n:
            return None
        length = mem[i + 1]
        header = 2
        if length == 0xFF:
            if i + 3 >= n:
                return None
            length = (mem[i + 2] << 8) | mem[i + 3]
            header = 4
        if t == TLV_NDEF:
            return i + header, length
        # lock control, memory control, proprietary ... skip
        i += header + length
    return None


def ndef_message_from_pages(pages: Iterable[bytes], first_page: int = 0) -> Optional[bytes]:
    """Extract the NDEF message from consecutive page dumps.

    `pages` starts at page index `first_page`; the TLV area begins at page 4.
    Returns None if no NDEF TLV was found, raises NdefFormatError when the TLV
    claims more bytes than were read."""
    mem = b"".join(bytes(p) for p in pages)
    skip = max(0, FIRST_USER_PAGE - first_page) * PAGE_SIZE
    user = mem[skip:]
    found = find_ndef_tlv(user)
    if found is None:
        return None
    off, length = found
    if off + length > len(user):
        raise NdefFormatError(
            f"NDEF TLV announces {length} bytes, only {max(0, len(user) - off)} available"
        )
    return user[off:off + length]


def parse_ndef_message(data: bytes) -> List[NdefRecord]:
    """Split an NDEF message into records.
    Stops after the record carrying the ME flag. Raises NdefFormatError on truncation."""
    records: List[NdefRecord] = []
    i = 0
    n = len(data)

    def take(count: int, what: str) -> bytes:
        nonlocal i
        if i + count > n:
            raise NdefFormatError(f"truncated {what} at offset {i}")
        chunk = data[i:i + count]
        i += count
        return chunk

    while i < n:
        hdr = take(1, "record header")[0]
        type_len = take(1, "type length")[0]
        if hdr & FLAG_SR:
            payload_len = take(1, "payload length")[0]
        else:
            payload_len = int.from_bytes(take(4, "payload length"), "big")
        id_len = take(1, "id length")[0] if hdr & FLAG_IL else 0

        rtype = take(type_len, "type")
        rid = take(id_len, "id")
        payload = take(payload_len, "payload")

        records.append(NdefRecord(
            tnf=hdr & TNF_MASK,
            type=bytes(rtype),
            payload=bytes(payload),
            id=bytes(rid),
            message_begin=bool(hdr & FLAG_MB),
            message_end=bool(hdr & FLAG_ME),
            chunked=bool(hdr & FLAG_CF),
        ))
        if hdr & FLAG_ME:
            break
    return records
