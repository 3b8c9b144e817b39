# tests/test_backend.py
import pytest

from nfc_page_tool_qt5.config.settings import Settings
from nfc_page_tool_qt5.nfc.backend import TagBackend
from nfc_page_tool_qt5.nfc.codec import decode_text_record
from nfc_page_tool_qt5.nfc.errors import (
    NoReaderError,
    NoTagError,
    TransportError,
    UnsupportedTechnologyError,
)
from conftest import ATR_CLASSIC_1K, UID, FakeConnection, make_ntag


def test_scan_ntag(use_connection):
    conn = use_connection(FakeConnection())
    logs = []
    scan = TagBackend(on_log=logs.append).scan()

    assert scan.uid == UID
    assert scan.technologies == ["NfcA", "MifareUltralight", "Ndef"]
    assert scan.probe.count == 45
    assert scan.probe.last_valid == 44
    (rec,) = scan.ndef_records
    assert decode_text_record(rec).text == "hi"
    assert scan.ndef_error is None
    assert conn.disconnected
    assert any(m.startswith("[OK] Read 45 pages") for m in logs)


def test_scan_uid_falls_back_to_page_memory(use_connection):
    use_connection(FakeConnection(uid_supported=False))
    logs = []
    scan = TagBackend(on_log=logs.append).scan()
    assert scan.uid == UID
    assert any("UID not available" in m for m in logs)


def test_scan_blank_formatted_tag(use_connection):
    use_connection(FakeConnection(pages=make_ntag(ndef=None)))
    scan = TagBackend().scan()
    assert "Ndef" in scan.technologies
    assert scan.ndef_records is None


def test_scan_unformatted_tag_has_no_ndef(use_connection):
    pages = make_ntag()
    pages[3] = bytes(4)
    use_connection(FakeConnection(pages=pages))
    scan = TagBackend().scan()
    assert scan.technologies == ["NfcA", "MifareUltralight"]
    assert scan.ndef_records is None


def test_scan_classic_skips_page_dump(use_connection):
    conn = use_connection(FakeConnection(atr=ATR_CLASSIC_1K))
    scan = TagBackend().scan()
    assert scan.technologies == ["NfcA", "MifareClassic"]
    assert scan.probe is None
    assert scan.uid == UID
    assert not any(a[1] == 0xB0 for a in conn.apdus)


def test_scan_tag_removed_during_probe(use_connection):
    use_connection(FakeConnection(lost_at_page=7))
    scan = TagBackend().scan()
    assert scan.probe.count == 7
    assert scan.probe.error
    # pages 4..6 still hold the whole TLV
    assert decode_text_record(scan.ndef_records[0]).text == "hi"


def test_scan_truncated_ndef_is_reported(use_connection):
    use_connection(FakeConnection(lost_at_page=5))
    scan = TagBackend().scan()
    assert scan.ndef_records is None
    assert scan.ndef_error


def test_scan_respects_probe_cap(use_connection):
    use_connection(FakeConnection())
    scan = TagBackend(Settings(probe_max_pages=8)).scan()
    assert scan.probe.count == 8


def test_no_reader(use_connection):
    use_connection(None)
    with pytest.raises(NoReaderError):
        TagBackend().scan()


def test_no_tag(use_connection):
    use_connection(FakeConnection(card_present=False))
    with pytest.raises(NoTagError):
        TagBackend().scan()


def test_write_page(use_connection):
    conn = use_connection(FakeConnection())
    data = TagBackend().write_page(5, "AB")
    assert data == b"AB\x00\x00"
    assert conn.pages[5] == b"AB\x00\x00"
    assert conn.disconnected


def test_write_empty_text_clears_page(use_connection):
    conn = use_connection(FakeConnection())
    TagBackend().write_page(6, "")
    assert conn.pages[6] == bytes(4)


def test_write_reserved_page_is_refused(use_connection):
    conn = use_connection(FakeConnection())
    with pytest.raises(ValueError):
        TagBackend().write_page(3, "x")
    assert conn.apdus == []


def test_write_unsupported_tag(use_connection):
    conn = use_connection(FakeConnection(atr=ATR_CLASSIC_1K))
    with pytest.raises(UnsupportedTechnologyError) as ei:
        TagBackend().write_page(5, "AB")
    assert str(ei.value) == "This tag doesn't support MifareUltralight writing"
    assert conn.apdus == []
    assert conn.disconnected


def test_write_rejected_by_tag(use_connection):
    use_connection(FakeConnection(readonly=True))
    with pytest.raises(TransportError):
        TagBackend().write_page(5, "AB")


@pytest.mark.parametrize("page", [256, 259])
def test_write_beyond_last_page_is_refused(use_connection, page):
    conn = use_connection(FakeConnection())
    with pytest.raises(ValueError):
        TagBackend().write_page(page, "ZZZZ")
    assert conn.apdus == []
    assert conn.pages[3] == b"\xe1\x10\x12\x00"
    assert conn.pages[0] == b"\x04\xa1\xb2\x99"
