"""
File-backed key-value store.

One file per key inside a directory. Writes go to a temp file that is
fsynced and then moved over the target with os.replace, so a crash leaves
either the old value or the new one, never a torn file. Each write gets
its own temp file, so concurrent writers are last-writer-wins.
"""

import asyncio
import os
import re
import tempfile
from pathlib import Path

from credstore.errors import UnderlyingStoreError

# Keys map directly to file names
_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{1,128}$")
FILE_SUFFIX = ".json"
FILE_MODE = 0o600


class FileKeyValueStore:
    """Stores each key as <directory>/<key>.json."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key) or key.startswith("."):
            raise UnderlyingStoreError(f"Invalid key for file store: {key!r}")
        return self.directory / f"{key}{FILE_SUFFIX}"

    def _get_sync(self, path: Path) -> str | None:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def _set_sync(self, path: Path, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        # Unique temp file per write; concurrent writers never share one
        fd, tmp = tempfile.mkstemp(
            dir=self.directory, prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            if hasattr(os, "fchmod"):
                os.fchmod(fd, FILE_MODE)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, path)
        except BaseException:
            try:
                os.unlink(tmp)
            except FileNotFoundError:
                pass
            raise

    def _remove_sync(self, path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass

    async def get(self, key: str) -> str | None:
        path = self._path_for(key)
        try:
            return await asyncio.to_thread(self._get_sync, path)
        except (OSError, UnicodeDecodeError) as e:
            raise UnderlyingStoreError(f"Could not read {path}: {e}") from e

    async def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        try:
            await asyncio.to_thread(self._set_sync, path, value)
        except OSError as e:
            raise UnderlyingStoreError(f"Could not write {path}: {e}") from e

    async def remove(self, key: str) -> None:
        path = self._path_for(key)
        try:
            await asyncio.to_thread(self._remove_sync, path)
        except OSError as e:
            raise UnderlyingStoreError(f"Could not remove {path}: {e}") from e
