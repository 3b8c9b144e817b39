# src/nfc_page_tool_qt5/nfc/backend.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from smartcard.Exceptions import NoCardException, SmartcardException

from ..config.settings import Settings
from ..constants import CC_PAGE, MAX_PAGE_INDEX, TECH_MIFARE_ULTRALIGHT, TECH_NDEF
from .codec import bytes_to_hex, encode_page
from .errors import NoReaderError, NoTagError, TransportError, UnsupportedTechnologyError
from .ndef import NdefFormatError, NdefRecord, is_ndef_formatted, ndef_message_from_pages, parse_ndef_message
from .pcsc import (
    connect_reader,
    disconnect_quietly,
    read_atr,
    read_uid,
    technologies_from_atr,
    uid_from_pages,
)
from .ultralight import ProbeResult, probe_pages, write_page


@dataclass
class TagScan:
    """Everything one scan of a tag produced. Nothing here outlives the scan."""
    uid: bytes = b""
    atr: bytes = b""
    technologies: List[str] = field(default_factory=list)
    ndef_records: Optional[List[NdefRecord]] = None   # None: no NDEF message on the tag
    ndef_error: Optional[str] = None
    probe: Optional[ProbeResult] = None   # None: no Ultralight support

    @property
    def supports_ultralight(self) -> bool:
        return TECH_MIFARE_ULTRALIGHT in self.technologies


class TagBackend:
    """
    Reads and writes tags on one PC/SC reader.
    Every call opens its own connection and closes it again; no state is kept
    between calls apart from the settings.
    """
    def __init__(self, settings: Optional[Settings] = None, on_log: Optional[Callable[[str], None]] = None):
        self.settings = settings or Settings()
        self.on_log = on_log or (lambda m: None)

    def _log(self, msg: str):
        self.on_log(msg)

    def _connect(self):
        conn = connect_reader(self.settings.reader_index)
        if conn is None:
            raise NoReaderError("No PC/SC reader found.")
        try:
            conn.connect()
        except NoCardException as e:
            raise NoTagError("No tag detected. Place a tag on the reader.") from e
        except SmartcardException as e:
            raise TransportError(f"Could not connect: {e}") from e
        return conn

    # ---------- READ ----------
    def scan(self) -> TagScan:
        """Read UID, technologies, page memory and NDEF records of the tag on the reader.
        Raises NoReaderError / NoTagError; read problems after connecting end up in the scan."""
        conn = self._connect()
        try:
            return self.scan_connection(conn)
        except SmartcardException as e:
            raise TransportError(f"Tag lost: {e}") from e
        finally:
            disconnect_quietly(conn)

    def scan_connection(self, conn) -> TagScan:
        scan = TagScan()
        scan.atr = read_atr(conn)
        self._log(f"[OK] ATR: {bytes_to_hex(scan.atr)}")
        scan.technologies = technologies_from_atr(scan.atr)

        uid, sw1, sw2 = read_uid(conn)
        if uid is None:
            self._log(f"[INFO] UID not available via GET DATA (SW={sw1:02X}{sw2:02X}).")

        if scan.supports_ultralight:
            scan.probe = probe_pages(conn, self.settings.probe_start_page, self.settings.probe_max_pages)
            self._log(f"[OK] Read {len(scan.probe.pages)} pages (last valid: {scan.probe.last_valid}).")
            if scan.probe.error:
                self._log(f"[WARN] Page read stopped at {scan.probe.count}: {scan.probe.error}")
            if uid is None:
                uid = uid_from_pages(scan.probe.page(0), scan.probe.page(1))
            if is_ndef_formatted(scan.probe.page(CC_PAGE)):
                scan.technologies.append(TECH_NDEF)
                self._read_ndef(scan)
        scan.uid = uid or b""
        return scan

    def _read_ndef(self, scan: TagScan):
        try:
            message = ndef_message_from_pages(scan.probe.pages, scan.probe.start)
            if message is not None:
                scan.ndef_records = parse_ndef_message(message)
                self._log(f"[OK] NDEF: {len(scan.ndef_records)} record(s).")
        except NdefFormatError as e:
            scan.ndef_error = str(e)
            self._log(f"[WARN] NDEF unreadable: {e}")

    # ---------- WRITE ----------
    def write_page(self, page: int, text: Optional[str]) -> bytes:
        """Encode `text` to one 4-byte page and write it. Returns the written bytes."""
        if page < self.settings.first_user_page:
            raise ValueError(f"Page {page} is reserved; first writable page is {self.settings.first_user_page}")
        if page > MAX_PAGE_INDEX:
            raise ValueError(f"Page {page} is not addressable; last page index is {MAX_PAGE_INDEX}")
        data = encode_page(text)
        conn = self._connect()
        try:
            if TECH_MIFARE_ULTRALIGHT not in technologies_from_atr(read_atr(conn)):
                raise UnsupportedTechnologyError("MifareUltralight writing")
            write_page(conn, page, data)
        except SmartcardException as e:
            raise TransportError(f"Tag lost: {e}") from e
        finally:
            disconnect_quietly(conn)
        self._log(f"[OK] Wrote {bytes_to_hex(data)} to page {page}.")
        return data
