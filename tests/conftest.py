"""Shared test fixtures for docpdf."""

import struct
from pathlib import Path

import docx
import pytest

from docpdf.config.models import DocPdfConfig

# ---------------------------------------------------------------------------
# Minimal compound file (OLE2) writer for Word 97 fixtures
# ---------------------------------------------------------------------------

_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"
_SECTOR = 512
_FREESECT = 0xFFFFFFFF
_ENDOFCHAIN = 0xFFFFFFFE
_FATSECT = 0xFFFFFFFD
_NOSTREAM = 0xFFFFFFFF
# Streams below this size would live in the mini stream; pad past it.
_MINI_CUTOFF = 4096


def _dir_entry(name, obj_type, start=_ENDOFCHAIN, size=0, right=_NOSTREAM, child=_NOSTREAM):
    entry = bytearray(128)
    raw = name.encode("utf-16-le") + b"\x00\x00" if name else b""
    entry[: len(raw)] = raw
    struct.pack_into("<H", entry, 64, len(raw))
    entry[66] = obj_type
    entry[67] = 1
    struct.pack_into("<III", entry, 68, _NOSTREAM, right, child)
    struct.pack_into("<I", entry, 116, start)
    struct.pack_into("<Q", entry, 120, size)
    return bytes(entry)


def _compound_file(streams):
    names = sorted(streams, key=lambda n: (len(n), n.upper()))
    assert len(names) <= 3

    fat = [_FATSECT, _ENDOFCHAIN]
    body = b""
    starts, sizes = {}, {}
    next_sector = 2
    for name in names:
        data = streams[name]
        data = data.ljust(max(len(data), _MINI_CUTOFF), b"\x00")
        data = data.ljust(-(-len(data) // _SECTOR) * _SECTOR, b"\x00")
        count = len(data) // _SECTOR
        starts[name], sizes[name] = next_sector, len(data)
        fat += [next_sector + i + 1 for i in range(count - 1)] + [_ENDOFCHAIN]
        next_sector += count
        body += data
    assert len(fat) <= _SECTOR // 4
    fat += [_FREESECT] * (_SECTOR // 4 - len(fat))

    entries = [_dir_entry("Root Entry", 5, child=1)]
    for i, name in enumerate(names):
        right = i + 2 if i + 1 < len(names) else _NOSTREAM
        entries.append(_dir_entry(name, 2, starts[name], sizes[name], right=right))
    while len(entries) < 4:
        entries.append(_dir_entry("", 0, start=0))

    header = bytearray(_SECTOR)
    header[:8] = _MAGIC
    struct.pack_into("<HHHHH", header, 24, 0x003E, 0x0003, 0xFFFE, 9, 6)
    struct.pack_into("<I", header, 44, 1)
    struct.pack_into("<I", header, 48, 1)
    struct.pack_into("<I", header, 56, _MINI_CUTOFF)
    struct.pack_into("<II", header, 60, _ENDOFCHAIN, 0)
    struct.pack_into("<II", header, 68, _ENDOFCHAIN, 0)
    struct.pack_into("<109I", header, 76, 0, *([_FREESECT] * 108))

    return bytes(header) + struct.pack("<128I", *fat) + b"".join(entries) + body


def _word_streams(pieces, *, table="1Table", encrypted=False, ccp_text=None):
    word = bytearray(0x800)
    flags = 0x0200 if table == "1Table" else 0
    if encrypted:
        flags |= 0x0100
    struct.pack_into("<HH", word, 0, 0xA5EC, 0x00C1)
    struct.pack_into("<H", word, 0x0A, flags)
    struct.pack_into("<H", word, 32, 14)
    struct.pack_into("<H", word, 62, 22)
    if ccp_text is None:
        ccp_text = sum(len(text) for text, _ in pieces)
    struct.pack_into("<i", word, 64 + 3 * 4, ccp_text)
    struct.pack_into("<H", word, 152, 93)

    cps, pcds = [0], []
    for text, compressed in pieces:
        offset = len(word)
        if compressed:
            word += text.encode("cp1252")
            fc = (offset * 2) | 0x40000000
        else:
            word += text.encode("utf-16-le")
            fc = offset
        cps.append(cps[-1] + len(text))
        pcds.append(struct.pack("<HIH", 0, fc, 0))

    plc = struct.pack(f"<{len(cps)}I", *cps) + b"".join(pcds)
    # A Prc entry before the Pcdt, as Word writes for formatted pieces.
    clx = b"\x01" + struct.pack("<h", 2) + b"\x00\x00"
    clx += b"\x02" + struct.pack("<I", len(plc)) + plc
    struct.pack_into("<II", word, 154 + 33 * 8, 0, len(clx))
    return {"WordDocument": bytes(word), table: clx}


@pytest.fixture
def make_doc(tmp_path):
    """Factory writing a Word 97 .doc made of (text, compressed) pieces."""

    def _make(name="sample.doc", pieces=(("Hello from Word 97\r", True),), **kwargs):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        streams = _word_streams(list(pieces), **kwargs)
        path.write_bytes(_compound_file(streams))
        return path

    return _make


@pytest.fixture
def word_streams():
    """Raw WordDocument/table streams, for fixtures that need to tamper with them."""
    return _word_streams


@pytest.fixture
def make_ole(tmp_path):
    """Factory writing an arbitrary compound file from raw streams."""

    def _make(name, streams):
        path = tmp_path / name
        path.write_bytes(_compound_file(streams))
        return path

    return _make


@pytest.fixture
def make_docx(tmp_path):
    """Factory writing a .docx through python-docx."""

    def _make(name="sample.docx", paragraphs=("Hello from docx",), heading=None, table=None):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        document = docx.Document()
        if heading:
            document.add_heading(heading, level=1)
        for text in paragraphs:
            document.add_paragraph(text)
        if table:
            out = document.add_table(rows=len(table), cols=len(table[0]))
            for r, row in enumerate(table):
                for c, value in enumerate(row):
                    out.cell(r, c).text = value
        document.save(str(path))
        return path

    return _make


@pytest.fixture
def sample_config():
    return DocPdfConfig()


# TrueType fonts with Cyrillic coverage, as shipped by common platforms.
_UNICODE_FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu-sans-fonts/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    "/usr/share/fonts/liberation-sans/LiberationSans-Regular.ttf",
    "/usr/share/fonts/truetype/freefont/FreeSans.ttf",
    "/Library/Fonts/Arial Unicode.ttf",
    "/System/Library/Fonts/Supplemental/Arial.ttf",
    "C:/Windows/Fonts/arial.ttf",
]


@pytest.fixture
def unicode_font():
    """Path of a TTF font covering Cyrillic; skips when the system has none."""
    for candidate in _UNICODE_FONT_CANDIDATES:
        if Path(candidate).is_file():
            return candidate
    pytest.skip("no TrueType font with Cyrillic coverage installed")
