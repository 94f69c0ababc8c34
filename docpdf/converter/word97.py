"""Reader for legacy binary Word documents (Word 97-2003 ``.doc``).

Only the main document text is extracted, through the piece table stored
in the CLX of the table stream. Character and paragraph formatting are
not interpreted; structural control characters are mapped onto the
paragraph model instead:

* ``\\r`` ends a paragraph, ``\\x07`` ends a table cell;
* ``\\x0c`` starts a new page, ``\\x0b`` is a manual line break;
* fields (``\\x13 code \\x14 result \\x15``) keep their displayed result.
"""

from __future__ import annotations

import logging
import struct
from pathlib import Path

import olefile

from docpdf.converter.models import (
    DocumentParseError,
    Word97Document,
    Word97Paragraph,
)

logger = logging.getLogger(__name__)

WORD_IDENT = 0xA5EC

_FLAG_ENCRYPTED = 0x0100
_FLAG_WHICH_TABLE = 0x0200

# FibBase is 32 bytes; ccpText is the fourth FibRgLw97 entry, fcClx the
# 34th FibRgFcLcb97 pair.
_FIB_BASE_SIZE = 32
_CCP_TEXT_INDEX = 3
_CLX_PAIR_INDEX = 33

_CLXT_PRC = 0x01
_CLXT_PCDT = 0x02
_PCD_SIZE = 8

_FIELD_BEGIN = "\x13"
_FIELD_SEPARATOR = "\x14"
_FIELD_END = "\x15"

_DROPPED = {"\x01", "\x02", "\x05", "\x08", "\x1f"}
_REPLACED = {"\x1e": "-", "\xa0": " ", "\x0b": "\n", "\t": " "}


def load(path: str | Path) -> Word97Document:
    """Parse a ``.doc`` file into a :class:`Word97Document`."""
    path = Path(path)
    try:
        if not olefile.isOleFile(str(path)):
            raise DocumentParseError(f"Not an OLE compound file: {path}", source=path)
        with olefile.OleFileIO(str(path)) as ole:
            if not ole.exists("WordDocument"):
                raise DocumentParseError(
                    f"No WordDocument stream in {path}", source=path
                )
            word_stream = ole.openstream("WordDocument").read()
            fib = _read_fib(word_stream, path)
            table_name = "1Table" if fib["which_table"] else "0Table"
            if not ole.exists(table_name):
                raise DocumentParseError(
                    f"Missing table stream {table_name} in {path}", source=path
                )
            table_stream = ole.openstream(table_name).read()
            title, author = _read_summary(ole)
    except DocumentParseError:
        raise
    except (OSError, ValueError, struct.error) as e:
        raise DocumentParseError(f"Failed to read {path}: {e}", source=path) from e

    clx = table_stream[fib["fc_clx"] : fib["fc_clx"] + fib["lcb_clx"]]
    text = _extract_text(word_stream, clx, fib["ccp_text"], path)
    paragraphs = split_paragraphs(text)
    logger.debug("parsed %s: %d paragraphs", path, len(paragraphs))
    return Word97Document(paragraphs=paragraphs, title=title, author=author)


def _read_fib(stream: bytes, path: Path) -> dict:
    if len(stream) < _FIB_BASE_SIZE + 2:
        raise DocumentParseError(f"Truncated FIB in {path}", source=path)

    ident, = struct.unpack_from("<H", stream, 0)
    if ident != WORD_IDENT:
        raise DocumentParseError(
            f"Unexpected Word identifier 0x{ident:04X} in {path}", source=path
        )
    flags, = struct.unpack_from("<H", stream, 0x0A)
    if flags & _FLAG_ENCRYPTED:
        raise DocumentParseError(
            f"Encrypted documents are not supported: {path}", source=path
        )

    offset = _FIB_BASE_SIZE
    csw, = struct.unpack_from("<H", stream, offset)
    offset += 2 + csw * 2
    cslw, = struct.unpack_from("<H", stream, offset)
    lw_start = offset + 2
    if cslw <= _CCP_TEXT_INDEX:
        raise DocumentParseError(f"FIB too short in {path}", source=path)
    ccp_text, = struct.unpack_from("<i", stream, lw_start + _CCP_TEXT_INDEX * 4)
    offset = lw_start + cslw * 4
    cb_rg_fc_lcb, = struct.unpack_from("<H", stream, offset)
    if cb_rg_fc_lcb <= _CLX_PAIR_INDEX:
        raise DocumentParseError(f"FIB has no piece table in {path}", source=path)
    fc_clx, lcb_clx = struct.unpack_from(
        "<II", stream, offset + 2 + _CLX_PAIR_INDEX * 8
    )

    return {
        "which_table": bool(flags & _FLAG_WHICH_TABLE),
        "ccp_text": max(ccp_text, 0),
        "fc_clx": fc_clx,
        "lcb_clx": lcb_clx,
    }


def _read_summary(ole: olefile.OleFileIO) -> tuple[str | None, str | None]:
    meta = ole.get_metadata()
    return _meta_text(meta.title), _meta_text(meta.author)


def _meta_text(value: bytes | str | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        value = value.decode("cp1252", errors="replace")
    value = value.strip("\x00").strip()
    return value or None


def _piece_table(clx: bytes, path: Path) -> bytes:
    """Skip the Prc entries and return the PlcPcd of the Pcdt."""
    pos = 0
    while pos < len(clx):
        clxt = clx[pos]
        if clxt == _CLXT_PRC:
            cb_grpprl, = struct.unpack_from("<h", clx, pos + 1)
            if cb_grpprl < 0 or pos + 3 + cb_grpprl > len(clx):
                break
            pos += 3 + cb_grpprl
        elif clxt == _CLXT_PCDT:
            lcb, = struct.unpack_from("<I", clx, pos + 1)
            if pos + 5 + lcb > len(clx):
                break
            return clx[pos + 5 : pos + 5 + lcb]
        else:
            break
    raise DocumentParseError(f"Malformed piece table in {path}", source=path)


def _extract_text(word_stream: bytes, clx: bytes, ccp_text: int, path: Path) -> str:
    try:
        plc = _piece_table(clx, path)
        count = (len(plc) - 4) // (4 + _PCD_SIZE)
        if count <= 0:
            raise DocumentParseError(f"Empty piece table in {path}", source=path)
        cps = struct.unpack_from(f"<{count + 1}I", plc, 0)
        pcd_base = 4 * (count + 1)

        chunks: list[str] = []
        remaining = ccp_text
        for i in range(count):
            if remaining <= 0:
                break
            length = min(cps[i + 1] - cps[i], remaining)
            fc_value, = struct.unpack_from("<I", plc, pcd_base + i * _PCD_SIZE + 2)
            compressed = bool(fc_value & 0x40000000)
            fc = fc_value & 0x3FFFFFFF
            if compressed:
                start = fc // 2
                raw = word_stream[start : start + length]
                chunks.append(raw.decode("cp1252", errors="replace"))
            else:
                raw = word_stream[fc : fc + length * 2]
                chunks.append(raw.decode("utf-16-le", errors="replace"))
            remaining -= length
    except struct.error as e:
        raise DocumentParseError(f"Corrupt piece table in {path}: {e}", source=path) from e
    return "".join(chunks)


def _strip_fields(text: str) -> str:
    """Keep only the displayed result of each (possibly nested) field."""
    out: list[str] = []
    # One entry per open field: True while inside its code part.
    stack: list[bool] = []
    for ch in text:
        if ch == _FIELD_BEGIN:
            stack.append(True)
        elif ch == _FIELD_SEPARATOR and stack:
            stack[-1] = False
        elif ch == _FIELD_END and stack:
            stack.pop()
        elif not any(stack):
            out.append(ch)
    return "".join(out)


def split_paragraphs(text: str) -> list[Word97Paragraph]:
    """Turn raw main-document text into paragraphs."""
    text = _strip_fields(text)
    paragraphs: list[Word97Paragraph] = []
    buf: list[str] = []
    page_break = False

    def flush(in_table: bool) -> None:
        nonlocal page_break
        paragraphs.append(
            Word97Paragraph(
                text="".join(buf), in_table=in_table, page_break_before=page_break
            )
        )
        buf.clear()
        page_break = False

    for ch in text:
        if ch == "\r":
            flush(in_table=False)
        elif ch == "\x07":
            flush(in_table=True)
        elif ch == "\x0c":
            if buf:
                flush(in_table=False)
            page_break = True
        elif ch in _DROPPED:
            continue
        elif ch in _REPLACED:
            buf.append(_REPLACED[ch])
        elif ch < " ":
            continue
        else:
            buf.append(ch)

    if buf:
        flush(in_table=False)
    return paragraphs
