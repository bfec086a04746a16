"""Object storage for uploaded receipt images."""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path, PurePosixPath
from typing import Iterable

from finscope.core.config import settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when an object cannot be written, read or removed."""


class ObjectStorage:
    """Minimal async object-store contract used by the receipt pipeline."""

    async def upload(self, path: str, data: bytes, content_type: str | None = None) -> None:
        raise NotImplementedError

    async def download(self, path: str) -> bytes:
        raise NotImplementedError

    async def remove(self, paths: Iterable[str]) -> None:
        raise NotImplementedError


class LocalObjectStorage(ObjectStorage):
    """Store objects as files below ``root``; keys are relative POSIX paths."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def _resolve(self, path: str) -> Path:
        key = PurePosixPath(path)
        if key.is_absolute() or ".." in key.parts or not key.parts:
            raise StorageError(f"Invalid object path: {path!r}")
        return self.root.joinpath(*key.parts)

    async def upload(self, path: str, data: bytes, content_type: str | None = None) -> None:
        target = self._resolve(path)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            # "xb" refuses to overwrite an existing object
            with open(target, "xb") as handle:
                handle.write(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as exc:
            raise StorageError(f"Upload failed for {path}: {exc}") from exc

    async def download(self, path: str) -> bytes:
        target = self._resolve(path)
        try:
            return await asyncio.to_thread(target.read_bytes)
        except OSError as exc:
            raise StorageError(f"Download failed for {path}: {exc}") from exc

    async def remove(self, paths: Iterable[str]) -> None:
        targets = [self._resolve(path) for path in paths]

        def _unlink() -> None:
            for target in targets:
                target.unlink(missing_ok=True)

        try:
            await asyncio.to_thread(_unlink)
        except OSError as exc:
            raise StorageError(f"Remove failed: {exc}") from exc


def get_storage() -> ObjectStorage:
    """Dependency returning the configured receipt store."""
    return LocalObjectStorage(settings.RECEIPTS_STORAGE_DIR)


__all__ = ["LocalObjectStorage", "ObjectStorage", "StorageError", "get_storage"]
