import io
import zipfile

import pytest

from src.errors import ArchiveParseError
from src.relay.archive import unwrap
from tests.utils import make_docx


def test_unwrap_preserves_members_and_order():
    entries = {
        "[Content_Types].xml": b"<Types/>",
        "xl/workbook.xml": b"<workbook/>",
        "xl/worksheets/sheet1.xml": b"<worksheet>" + b"x" * 5000 + b"</worksheet>",
    }
    result = unwrap(make_docx(entries))

    with zipfile.ZipFile(io.BytesIO(result)) as archive:
        assert archive.namelist() == list(entries)
        for name, data in entries.items():
            assert archive.read(name) == data
        assert archive.testzip() is None


def test_unwrap_keeps_compression_and_comment():
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as source:
        source.comment = b"exported"
        source.writestr("stored.txt", b"plain", compress_type=zipfile.ZIP_STORED)
        source.writestr("deflated.txt", b"squeezed" * 100, compress_type=zipfile.ZIP_DEFLATED)

    with zipfile.ZipFile(io.BytesIO(unwrap(buffer.getvalue()))) as archive:
        assert archive.comment == b"exported"
        assert archive.getinfo("stored.txt").compress_type == zipfile.ZIP_STORED
        assert archive.getinfo("deflated.txt").compress_type == zipfile.ZIP_DEFLATED


@pytest.mark.parametrize("payload", [b"not a zip at all", b"PK\x03\x04truncated", b""])
def test_unwrap_rejects_malformed_archives(payload):
    with pytest.raises(ArchiveParseError) as exc_info:
        unwrap(payload)
    assert exc_info.value.error_code == "archive_parse_error"
