# src/nfc_page_tool_qt5/nfc/ultralight.py
# Ultralight / NTAG page access: single page reads with tagged outcomes,
# probing the readable page range and 4-byte page writes.
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from smartcard.Exceptions import SmartcardException

from ..constants import MAX_PAGE_INDEX, PAGE_SIZE, PROBE_MAX_PAGES
from .errors import TransportError
from .pcsc import SW_OK, cmd_read_pages, cmd_write_page, transmit


class ReadStatus(Enum):
    OK = "ok"
    OUT_OF_RANGE = "out_of_range"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class PageRead:
    page: int
    status: ReadStatus
    data: bytes = b""
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is ReadStatus.OK


@dataclass
class ProbeResult:
    """Pages read by probe_pages().

    `count` is the first index that could not be read, so pages
    `start .. count-1` are in `pages` and `last_valid == count - 1`."""
    start: int = 0
    pages: List[bytes] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def count(self) -> int:
        return self.start + len(self.pages)

    @property
    def last_valid(self) -> int:
        return self.count - 1

    def page(self, index: int) -> Optional[bytes]:
        i = index - self.start
        if 0 <= i < len(self.pages):
            return self.pages[i]
        return None


def read_page(conn, page: int) -> PageRead:
    """Read one 4-byte page.
    The reader returns 16 bytes (4 pages) for a READ; only the first page is kept."""
    try:
        data, sw1, sw2 = transmit(conn, cmd_read_pages(page))
    except SmartcardException as e:
        return PageRead(page, ReadStatus.TRANSPORT_ERROR, message=str(e))
    if (sw1, sw2) != SW_OK or len(data) < PAGE_SIZE:
        return PageRead(page, ReadStatus.OUT_OF_RANGE, message=f"SW={sw1:02X}{sw2:02X}")
    return PageRead(page, ReadStatus.OK, data=bytes(data[:PAGE_SIZE]))


def probe_pages(conn, start: int = 0, max_pages: int = PROBE_MAX_PAGES) -> ProbeResult:
    """Read pages start, start+1, ... below index `max_pages` until the first failing read.
    An out-of-range answer is the normal end of the tag; a transport error also
    ends the loop and is kept in `error`. Never raises for read failures.
    Pages above MAX_PAGE_INDEX are not addressable and are never read."""
    result = ProbeResult(start=start)
    for page in range(start, min(max_pages, MAX_PAGE_INDEX + 1)):
        pr = read_page(conn, page)
        if not pr.ok:
            if pr.status is ReadStatus.TRANSPORT_ERROR:
                result.error = pr.message or "connection lost"
            break
        result.pages.append(pr.data)
    return result


def write_page(conn, page: int, data4: bytes) -> None:
    """Write exactly 4 bytes to one page. Raises TransportError on a non-9000 answer."""
    if not isinstance(data4, (bytes, bytearray)) or len(data4) != PAGE_SIZE:
        raise ValueError("write_page expects exactly 4 bytes")
    try:
        _, sw1, sw2 = transmit(conn, cmd_write_page(page, bytes(data4)))
    except SmartcardException as e:
        raise TransportError(str(e)) from e
    if (sw1, sw2) != SW_OK:
        raise TransportError(f"WRITE failed for page {page}: SW1/SW2={sw1:02X}/{sw2:02X}", sw1, sw2)
