"""Upload storage for project covers and task attachments.

Only the reference returned by :meth:`UploadStore.save` is persisted on the
entity; the blob itself lives wherever the store puts it.

Example:
    >>> store = LocalUploadStore(UploadConfig(root=Path("/srv/uploads")))
    >>> ref = await store.save(b"...", "cover.png", folder="covers")
    >>> ref
    '/uploads/covers/6f0c...e1.png'
"""

from __future__ import annotations

import asyncio
import uuid
from pathlib import Path
from typing import Protocol

from taskboard.config import UploadConfig
from taskboard.logging import get_logger

logger = get_logger(__name__)


class UploadStore(Protocol):
    """Anything that can store a blob and hand back a public reference."""

    async def save(self, data: bytes, filename: str, folder: str) -> str: ...


def _extension(filename: str) -> str:
    suffix = Path(filename or "").suffix.lower().lstrip(".")
    if suffix and suffix.isalnum():
        return suffix
    return "bin"


def _safe_folder(folder: str) -> str:
    parts = [p for p in Path(folder).parts if p not in ("", ".", "..", "/")]
    if not parts:
        raise ValueError(f"Invalid upload folder: {folder!r}")
    return "/".join(parts)


class LocalUploadStore:
    """Writes uploads to the local filesystem.

    Files land at ``<root>/<folder>/<uuid>.<ext>`` and are referenced as
    ``<public_prefix>/<folder>/<uuid>.<ext>``.
    """

    def __init__(self, config: UploadConfig) -> None:
        self.config = config
        self.root = Path(config.root)

    async def save(self, data: bytes, filename: str, folder: str) -> str:
        """Store ``data`` and return its public reference.

        Args:
            data: File content
            filename: Client filename, only its extension is kept
            folder: Sub-folder under the upload root

        Raises:
            ValueError: If the content exceeds the configured size limit or
                the folder is invalid.
        """
        if len(data) > self.config.max_bytes:
            raise ValueError(
                f"Upload of {len(data)} bytes exceeds limit of {self.config.max_bytes}"
            )

        folder = _safe_folder(folder)
        stored_name = f"{uuid.uuid4()}.{_extension(filename)}"
        target = self.root / folder / stored_name

        await asyncio.to_thread(self._write, target, data)

        reference = f"{self.config.public_prefix.rstrip('/')}/{folder}/{stored_name}"
        logger.info("upload_saved", reference=reference, size=len(data))
        return reference

    @staticmethod
    def _write(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
