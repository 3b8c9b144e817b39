# src/nfc_page_tool_qt5/ui/page_options.py
"""
Entries for the write-page selector.
Kept free of Qt so the label format can be tested without a display.
"""

from __future__ import annotations

from ..constants import FIRST_USER_PAGE


def page_options(page_count: int, first_page: int = FIRST_USER_PAGE) -> list[str]:
    """
    'Page <first>' .. 'Page <page_count - 1>' for a tag that answered
    `page_count` pages. Empty if nothing above the reserved header was read.
    """
    return [f"Page {p}" for p in range(first_page, page_count)]


def parse_page_option(label: str) -> int:
    """'Page 7' -> 7. Raises ValueError for anything else."""
    s = (label or "").replace("Page", "").strip()
    page = int(s)
    if page < 0:
        raise ValueError(f"negative page: {label!r}")
    return page
