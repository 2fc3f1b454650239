"""File storage for example images.

The database only keeps metadata rows (ExampleImage); bytes go through a
``FileStorage``. ``LocalFileStorage`` writes under ``settings.storage_dir``;
the uploads router serves the bytes at ``settings.storage_url`` while the
owning audit is live.
"""


import asyncio
import logging
import re
import uuid
from pathlib import Path
from typing import Protocol

from rgaa_audit.core.config import settings

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class FileStorage(Protocol):
    async def save(self, data: bytes, filename: str) -> str:
        """Persist *data* and return its storage key."""
        ...

    async def read(self, key: str) -> bytes:
        """Return the bytes stored under *key*. Raises FileNotFoundError."""
        ...

    async def delete(self, key: str) -> None:
        ...


def make_key(filename: str) -> str:
    """Generate a unique key that keeps a readable, URL-safe filename."""
    name = _UNSAFE_CHARS.sub("-", Path(filename).name).strip("-.") or "image"
    return f"{uuid.uuid4()}/{name}"


class LocalFileStorage:
    def __init__(self, root: str | Path):
        self._root = Path(root)

    def _path(self, key: str) -> Path:
        path = (self._root / key).resolve()
        if self._root.resolve() not in path.parents:
            raise ValueError(f"Invalid storage key: {key!r}")
        return path

    async def save(self, data: bytes, filename: str) -> str:
        key = make_key(filename)
        path = self._path(key)
        await asyncio.to_thread(self._write, path, data)
        logger.info("Stored %d bytes at %s", len(data), key)
        return key

    async def read(self, key: str) -> bytes:
        return await asyncio.to_thread(self._path(key).read_bytes)

    async def delete(self, key: str) -> None:
        path = self._path(key)
        await asyncio.to_thread(self._remove, path)
        logger.info("Deleted stored file %s", key)

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    @staticmethod
    def _remove(path: Path) -> None:
        path.unlink(missing_ok=True)
        try:
            path.parent.rmdir()
        except OSError:
            pass  # directory not empty


def get_storage() -> FileStorage:
    """FastAPI dependency returning the configured storage backend."""
    return LocalFileStorage(settings.storage_dir)
