import pytest

from xmlskim import decode_xml
from xmlskim.encoding import normalize_encoding_label, sniff_xml_encoding


@pytest.mark.parametrize(
    "label, expected",
    [
        ("UTF-8", "utf-8"),
        (" utf8 ", "utf-8"),
        (b"latin1", "iso-8859-1"),
        ("cp1252", "windows-1252"),
        ("US-ASCII", "ascii"),
        ("shift_jis", "shift_jis"),
        ("utf-7", None),
        ("no-such-encoding", None),
        ("", None),
        (None, None),
    ],
)
def test_normalize_encoding_label(label, expected):
    assert normalize_encoding_label(label) == expected


def test_default_is_utf8():
    assert sniff_xml_encoding(b"<a/>") == ("utf-8", 0)
    text, enc = decode_xml("<a t='é'/>".encode())
    assert text == "<a t='é'/>"
    assert enc == "utf-8"


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"\xef\xbb\xbf<a/>", ("utf-8", 3)),
        (b"\xff\xfe<\x00a\x00/\x00>\x00", ("utf-16le", 2)),
        (b"\xfe\xff\x00<\x00a\x00/\x00>", ("utf-16be", 2)),
    ],
)
def test_byte_order_mark(data, expected):
    assert sniff_xml_encoding(data) == expected
    assert decode_xml(data)[0] == "<a/>"


def test_utf16_without_bom():
    data = '<?xml version="1.0"?><a/>'.encode("utf-16le")
    assert sniff_xml_encoding(data) == ("utf-16le", 0)
    assert decode_xml(data)[0] == '<?xml version="1.0"?><a/>'


def test_declared_encoding():
    data = "<?xml version='1.0' encoding='ISO-8859-1'?><a>é</a>".encode("latin-1")
    text, enc = decode_xml(data)
    assert enc == "iso-8859-1"
    assert "é" in text


def test_declaration_must_start_document():
    assert sniff_xml_encoding(b" <?xml version='1.0' encoding='latin1'?>") == ("utf-8", 0)


def test_declared_utf16_in_ascii_bytes_is_utf8():
    assert sniff_xml_encoding(b'<?xml version="1.0" encoding="UTF-16"?><a/>') == ("utf-8", 0)


def test_transport_encoding_wins():
    data = b"\xef\xbb\xbf<?xml version='1.0' encoding='utf-8'?>"
    assert sniff_xml_encoding(data, transport_encoding="latin-1") == ("iso-8859-1", 0)


def test_invalid_bytes_are_replaced():
    text, _ = decode_xml(b"<a t='\xff'/>")
    assert text == "<a t='\ufffd'/>"


@pytest.mark.parametrize("label", ["UTF-16", "UTF_16LE", "utf-16-be", "UTF-32", "utf_32_le"])
def test_declared_wide_encoding_in_ascii_bytes_is_utf8(label):
    data = f'<?xml version="1.0" encoding="{label}"?><a/>'.encode("ascii")
    assert sniff_xml_encoding(data) == ("utf-8", 0)
    assert decode_xml(data)[0].endswith("<a/>")
