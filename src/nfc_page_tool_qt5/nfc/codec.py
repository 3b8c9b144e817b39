# src/nfc_page_tool_qt5/nfc/codec.py
# Pure byte-level helpers: NDEF Text decoding, HEX/ASCII rendering, 4-byte page encoding.
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from ..constants import PAGE_SIZE
from .ndef import NdefRecord, TNF_WELL_KNOWN, RTD_TEXT

# Text RTD status byte
TEXT_UTF16_FLAG = 0x80
TEXT_LANG_LEN_MASK = 0x3F

_UTF16_BOMS = (b"\xFE\xFF", b"\xFF\xFE")


@dataclass(frozen=True)
class TextRecord:
    """Decoded well-known Text record."""
    language: str
    text: str
    encoding: str  # "utf-8" or "utf-16"


def decode_text_payload(payload: bytes) -> Optional[TextRecord]:
    """Decode the payload of a Text record.
    Returns None if the payload is empty, the language length runs past the end
    or the text is not valid in the selected encoding."""
    if not payload:
        return None
    status = payload[0]
    utf16 = (status & TEXT_UTF16_FLAG) != 0
    lang_len = status & TEXT_LANG_LEN_MASK
    start = 1 + lang_len
    if start > len(payload):
        return None

    raw = bytes(payload[start:])
    if utf16:
        # BOM wins; without one the NFC Forum default is big-endian
        codec = "utf-16" if raw[:2] in _UTF16_BOMS else "utf-16-be"
    else:
        codec = "utf-8"
    try:
        text = raw.decode(codec)
    except UnicodeDecodeError:
        return None

    language = bytes(payload[1:start]).decode("ascii", errors="replace")
    return TextRecord(language=language, text=text, encoding="utf-16" if utf16 else "utf-8")


def decode_text_record(record: NdefRecord) -> Optional[TextRecord]:
    """Return the decoded Text record, or None when the record is not a
    well-known 'T' record or cannot be decoded (caller shows raw hex instead)."""
    if record.tnf != TNF_WELL_KNOWN or record.type != RTD_TEXT:
        return None
    return decode_text_payload(record.payload)


def bytes_to_hex(data: bytes) -> str:
    """'0A FF' style bytes -> '0AFF' (uppercase, no separators)."""
    return "".join(f"{b:02X}" for b in (data or b""))


def bytes_to_ascii(data: bytes) -> str:
    """Printable ASCII (32..126) verbatim, everything else as '.'."""
    return "".join(chr(b) if 32 <= b <= 126 else "." for b in (data or b""))


def encode_page(text: Optional[str], width: int = PAGE_SIZE) -> bytes:
    """Build exactly `width` bytes from user text.
    Longer input is truncated, shorter input is zero padded,
    characters above 127 become '?' (0x3F)."""
    out = bytearray(width)
    if not text:
        return bytes(out)
    for i, ch in enumerate(text[:width]):
        code = ord(ch)
        out[i] = code if code <= 0x7F else 0x3F
    return bytes(out)
