# src/nfc_page_tool_qt5/nfc/report.py
# Multi-line text report of one scan: tag ID, NDEF data, technologies, page dump.
from __future__ import annotations
from typing import List

from .backend import TagScan
from .codec import bytes_to_ascii, bytes_to_hex, decode_text_record
from .ndef import NdefRecord
from .ultralight import ProbeResult


def tech_short_name(name: str) -> str:
    """'android.nfc.tech.NfcA' -> 'NfcA'."""
    return name[name.rfind(".") + 1:]


def format_record(record: NdefRecord) -> str:
    text = decode_text_record(record)
    if text is not None:
        return f"Text: {text.text}"
    return f"Raw payload: {bytes_to_hex(record.payload)}"


def format_page(page: int, data: bytes) -> str:
    line = f"Page {page}: {bytes_to_hex(data)}"
    ascii_text = bytes_to_ascii(data)
    if ascii_text.strip():
        line += f" ({ascii_text})"
    return line


def _ndef_lines(scan: TagScan) -> List[str]:
    if scan.ndef_error:
        return [f"Error reading NDEF: {scan.ndef_error}"]
    if scan.ndef_records is None:
        return ["No NDEF data found"]
    if not scan.ndef_records:
        return []
    return ["NDEF Data:"] + [format_record(r) for r in scan.ndef_records]


def _page_lines(probe: ProbeResult) -> List[str]:
    if probe.error and not probe.pages:
        return [f"Error connecting to MifareUltralight: {probe.error}"]
    lines = ["Mifare Ultralight Memory Pages:"]
    for i, data in enumerate(probe.pages):
        lines.append(format_page(probe.start + i, data))
    if probe.error:
        lines.append(f"Read stopped at page {probe.count}: {probe.error}")
    return lines


def build_report(scan: TagScan) -> str:
    lines = [f"Tag ID: {bytes_to_hex(scan.uid) or 'unknown'}", ""]
    lines += _ndef_lines(scan)

    lines += ["", "Supported Technologies:"]
    lines += [f"- {tech_short_name(t)}" for t in scan.technologies]

    lines.append("")
    if scan.probe is None:
        lines.append("This tag does not support MifareUltralight technology")
    else:
        lines += _page_lines(scan.probe)
    return "\n".join(lines) + "\n"
