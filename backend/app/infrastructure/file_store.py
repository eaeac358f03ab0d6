"""Local File Store — writes uploaded photos under the public uploads directory.

Invariants:
    - Files are written once under a caller-supplied unique name; existing names are never overwritten
    - All OS failures mapped to StorageError (core/errors.py)
    - Blocking file IO runs in a worker thread (asyncio.to_thread)
"""

import asyncio
import logging
from pathlib import Path

from app.core.errors import StorageError

logger = logging.getLogger(__name__)


class LocalFileStore:
    """Stores photo bytes in a directory served at /uploads."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def path_for(self, name: str) -> Path:
        return self.root / name

    async def save(self, name: str, data: bytes) -> Path:
        """Write `data` to <root>/<name>; fails if the name is already taken."""
        try:
            return await asyncio.to_thread(self._write, name, data)
        except OSError as e:
            logger.error(f"Failed to store upload {name}: {e}", exc_info=True)
            raise StorageError(f"could not write '{name}'")

    async def remove(self, name: str) -> None:
        """Delete a stored file; missing files are ignored."""
        try:
            await asyncio.to_thread(self.path_for(name).unlink, missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to remove upload {name}: {e}")

    def _write(self, name: str, data: bytes) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        target = self.path_for(name)
        # "xb": exclusive create, raises FileExistsError on collision
        with target.open("xb") as out_file:
            out_file.write(data)
        return target
