"""Local upload directory used as the durable file store.

Files are written under a generated ``<uuid4>_<filename>`` name; that name is
the opaque handle stored on the Document row. Handles never contain path
separators, so resolving one cannot escape the upload directory.
"""

from __future__ import annotations

import uuid
from pathlib import Path

from docinsight.errors import StorageFailure
from docinsight.utils.logging import get_logger

_logger = get_logger(__name__)


class FileStorage:
    """Store, resolve and delete uploaded files inside *upload_dir*."""

    def __init__(self, upload_dir: Path | str) -> None:
        self.root = Path(upload_dir).expanduser().resolve()
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageFailure(f"Could not create upload directory '{self.root}'") from exc

    def store(self, data: bytes, filename: str) -> str:
        """Write *data* under a collision-resistant name and return its handle.

        Raises:
            StorageFailure: If *filename* is unsafe or the write fails.
        """
        clean = _clean_filename(filename)
        handle = f"{uuid.uuid4()}_{clean}"
        target = self.root / handle
        try:
            target.write_bytes(data)
        except OSError as exc:
            _logger.error("file_store_failed", filename=clean, error=str(exc))
            raise StorageFailure(f"Failed to store file '{clean}'") from exc

        _logger.info("file_stored", handle=handle, size_bytes=len(data))
        return handle

    def read_path(self, handle: str) -> Path:
        """Return the filesystem path for *handle*.

        Raises:
            StorageFailure: If *handle* does not name a file in the upload directory.
        """
        path = (self.root / handle).resolve()
        if path.parent != self.root:
            raise StorageFailure(f"Invalid storage handle: '{handle}'")
        return path

    def delete(self, handle: str) -> bool:
        """Delete the file behind *handle*. Never raises.

        Returns:
            True if the file is gone afterwards, False if deletion failed.
        """
        try:
            path = self.read_path(handle)
            path.unlink(missing_ok=True)
        except (OSError, StorageFailure) as exc:
            _logger.warning("file_delete_failed", handle=handle, error=str(exc))
            return False

        _logger.info("file_deleted", handle=handle)
        return True


def _clean_filename(filename: str) -> str:
    """Reduce *filename* to a safe basename.

    Raises:
        StorageFailure: If the name is empty or contains a ``..`` segment.
    """
    if not filename or ".." in filename:
        raise StorageFailure(f"Invalid file name: '{filename}'")
    name = Path(filename.replace("\\", "/")).name.strip()
    if not name:
        raise StorageFailure(f"Invalid file name: '{filename}'")
    return name
