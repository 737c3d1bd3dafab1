"""
Local Filesystem Storage Implementation.
Stores every document as a file below a base directory.
"""

import os
import logging
import aiofiles
import aiofiles.os
from pathlib import Path
from typing import Optional, List

from .interface import StorageInterface

logger = logging.getLogger(__name__)


class LocalStorage(StorageInterface):
    """
    Local filesystem storage.
    Writes go to a temporary sibling file first and are then renamed into
    place, so readers never observe a half-written document.
    """

    def __init__(self, base_dir: str = "./data"):
        self.base_dir = Path(base_dir).resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _get_full_path(self, path: str) -> Path:
        """Convert relative path to an absolute path inside the base directory."""
        full_path = (self.base_dir / path).resolve()
        if full_path != self.base_dir and self.base_dir not in full_path.parents:
            raise ValueError(f"Invalid path: {path} - path traversal detected")
        return full_path

    async def save(self, path: str, content: bytes | str) -> bool:
        full_path = self._get_full_path(path)
        tmp_path = full_path.with_name(full_path.name + ".tmp")
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            data = content.encode('utf-8') if isinstance(content, str) else content
            async with aiofiles.open(tmp_path, 'wb') as f:
                await f.write(data)
            await aiofiles.os.replace(tmp_path, full_path)
            return True
        except OSError as e:
            logger.error(f"Error saving file {path}: {e}")
            return False

    async def load(self, path: str) -> Optional[bytes]:
        full_path = self._get_full_path(path)
        try:
            async with aiofiles.open(full_path, 'rb') as f:
                return await f.read()
        except FileNotFoundError:
            return None

    async def exists(self, path: str) -> bool:
        return await aiofiles.os.path.exists(self._get_full_path(path))

    async def delete(self, path: str) -> bool:
        full_path = self._get_full_path(path)
        try:
            await aiofiles.os.remove(full_path)
            return True
        except FileNotFoundError:
            return False

    async def list(self, path: str, pattern: Optional[str] = None) -> List[str]:
        full_path = self._get_full_path(path)
        if not full_path.is_dir():
            return []

        files = [p for p in full_path.glob(pattern or "*") if p.is_file()]
        return sorted(
            str(p.relative_to(self.base_dir)).replace(os.sep, "/")
            for p in files
            if not p.name.endswith(".tmp")
        )
