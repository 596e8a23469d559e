"""Re-serialization of zip containers returned by the export service.

Office documents (.docx, .xlsx) are themselves zip containers. The export
service hands them back as such, and the relay parses the container and
writes an equivalent one back out before uploading it, so that whatever
reaches storage is a well-formed archive.
"""
import io
import zipfile

from src.errors import ArchiveParseError


def unwrap(archive_bytes: bytes) -> bytes:
    """Parse ``archive_bytes`` as a zip container and re-emit it as one contiguous buffer.

    Member order, names, timestamps, compression and attributes are carried over
    unchanged, as is the archive comment.
    """
    try:
        with zipfile.ZipFile(io.BytesIO(archive_bytes)) as source:
            output = io.BytesIO()
            with zipfile.ZipFile(output, "w") as target:
                target.comment = source.comment
                for info in source.infolist():
                    target.writestr(info, source.read(info))
    except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError, NotImplementedError) as e:
        raise ArchiveParseError(f"Failed to parse archive: {e}") from e
    return output.getvalue()
