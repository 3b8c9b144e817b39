# src/nfc_page_tool_qt5/config/settings.py
from __future__ import annotations
import configparser
import os
from dataclasses import dataclass
from importlib import resources
from typing import Optional

from ..constants import FIRST_USER_PAGE, MAX_PAGE_INDEX, PROBE_MAX_PAGES

ENV_CONFIG = "NFC_PAGE_TOOL_CONFIG"


@dataclass(frozen=True)
class Settings:
    reader_index: int = 0
    wait_timeout_s: float = 30.0
    poll_interval_s: float = 0.5
    presence_refresh_ms: int = 2000
    probe_start_page: int = 0
    probe_max_pages: int = PROBE_MAX_PAGES
    first_user_page: int = FIRST_USER_PAGE


def _read_packaged_defaults(parser: configparser.ConfigParser):
    # packaged default (config/ has no __init__.py)
    text = (resources.files("nfc_page_tool_qt5").joinpath("config").joinpath("nfc_page_tool.ini")
            .read_text(encoding="utf-8"))
    parser.read_string(text, source="nfc_page_tool.ini")


def load_settings(path: Optional[str] = None) -> Settings:
    """
    Load settings from the packaged INI, then overlay `path`
    (or the file named by $NFC_PAGE_TOOL_CONFIG) if given.
    Raises ValueError for values that are not numbers or out of range.
    """
    parser = configparser.ConfigParser()
    _read_packaged_defaults(parser)

    user_path = path or os.environ.get(ENV_CONFIG)
    if user_path:
        with open(user_path, "r", encoding="utf-8") as f:
            parser.read_file(f, source=user_path)

    try:
        s = Settings(
            reader_index=parser.getint("reader", "index"),
            wait_timeout_s=parser.getfloat("reader", "wait_timeout_s"),
            poll_interval_s=parser.getfloat("reader", "poll_interval_s"),
            presence_refresh_ms=parser.getint("reader", "presence_refresh_ms"),
            probe_start_page=parser.getint("probe", "start_page"),
            probe_max_pages=parser.getint("probe", "max_pages"),
            first_user_page=parser.getint("write", "first_user_page"),
        )
    except (configparser.Error, ValueError) as e:
        raise ValueError(f"Invalid settings: {e}") from e

    if s.reader_index < 0 or s.probe_start_page < 0 or s.first_user_page < 0:
        raise ValueError("Invalid settings: negative index")
    if s.probe_max_pages <= s.probe_start_page:
        raise ValueError("Invalid settings: [probe] max_pages must be greater than start_page")
    if s.probe_max_pages > MAX_PAGE_INDEX + 1:
        raise ValueError(f"Invalid settings: [probe] max_pages must not exceed {MAX_PAGE_INDEX + 1}")
    return s
