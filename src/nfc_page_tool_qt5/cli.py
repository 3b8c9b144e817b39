# src/nfc_page_tool_qt5/cli.py
# Command line harness: read a tag and print the report, or write one page.
# - Uses the same backend as the window.
# - Run while a tag is on the reader (or pass --wait).

from __future__ import annotations
import argparse
import sys
from dataclasses import replace
from typing import List, Optional

from .config.settings import load_settings
from .nfc.backend import TagBackend
from .nfc.codec import bytes_to_hex
from .nfc.errors import TagError
from .nfc.pcsc import disconnect_quietly, wait_for_card
from .nfc.report import build_report


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="nfc-page-tool", description="Read/write NTAG/Ultralight tags via PC/SC.")
    p.add_argument("--config", help="INI file overriding the packaged defaults")
    p.add_argument("--reader", type=int, help="Reader index (default from config: 0)")
    p.add_argument("--wait", type=float, default=0.0, metavar="SECONDS",
                   help="Wait up to SECONDS for a tag before giving up (default: 0)")
    p.add_argument("-v", "--verbose", action="store_true", help="Print backend log lines to stderr")
    sub = p.add_subparsers(dest="command", required=True)

    rd = sub.add_parser("read", help="Print tag ID, NDEF text, technologies and page dump")
    rd.add_argument("--max-pages", type=int, help="Probe pages below this index (default from config: 200)")

    wr = sub.add_parser("write", help="Write up to 4 ASCII characters to one page")
    wr.add_argument("page", type=int, help="Page index (user pages start at 4)")
    wr.add_argument("text", nargs="?", default="", help="Text; empty writes 00 00 00 00")
    return p.parse_args(argv)


def _wait(backend: TagBackend, seconds: float) -> bool:
    s = backend.settings
    conn = wait_for_card(s.reader_index, timeout_s=seconds, poll_interval_s=s.poll_interval_s)
    if conn is None:
        return False
    disconnect_quietly(conn)
    return True


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    try:
        settings = load_settings(args.config)
    except (OSError, ValueError) as e:
        print(f"[ERROR] {e}")
        return 1
    if args.reader is not None:
        settings = replace(settings, reader_index=args.reader)
    if args.command == "read" and args.max_pages is not None:
        settings = replace(settings, probe_max_pages=args.max_pages)

    log = (lambda m: print(m, file=sys.stderr)) if args.verbose else None
    backend = TagBackend(settings, on_log=log)

    if args.wait > 0 and not _wait(backend, args.wait):
        print("[ERROR] No tag detected within timeout.")
        return 1

    try:
        if args.command == "read":
            print(build_report(backend.scan()), end="")
        else:
            data = backend.write_page(args.page, args.text)
            print(f"[OK] Wrote {bytes_to_hex(data)} to page {args.page}")
    except (TagError, ValueError) as e:
        print(f"[ERROR] {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
