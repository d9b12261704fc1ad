"""
Local Filesystem Storage Implementation.
This implementation stores all data on the server's local filesystem.
"""

import asyncio
import logging
import shutil
import aiofiles
import aiofiles.os
from pathlib import Path
from typing import Optional, List
import glob as glob_module

from .interface import StorageInterface
from ..core.exceptions import StorageError

logger = logging.getLogger(__name__)


class LocalStorage(StorageInterface):
    """
    Local filesystem storage implementation.
    Stores all data in a base directory on the server.
    """

    def __init__(self, base_dir: str = "./data"):
        """
        Initialize local storage with a base directory.

        Args:
            base_dir: Base directory for all stored files
        """
        self.base_dir = Path(base_dir).resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _get_full_path(self, path: str) -> Path:
        """Convert relative path to full absolute path within base directory."""
        full_path = (self.base_dir / path).resolve()

        # Security check: ensure path is within base_dir
        if full_path != self.base_dir and self.base_dir not in full_path.parents:
            raise StorageError("path resolution", f"{path} escapes the storage root")

        return full_path

    async def save(self, path: str, content: bytes | str) -> None:
        """Save content to local filesystem."""
        full_path = self._get_full_path(path)
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)

            if isinstance(content, str):
                async with aiofiles.open(full_path, 'w', encoding='utf-8') as f:
                    await f.write(content)
            else:
                async with aiofiles.open(full_path, 'wb') as f:
                    await f.write(content)
        except OSError as e:
            logger.error(f"Error saving file {path}: {e}", exc_info=True)
            raise StorageError("save", f"{path}: {e}") from e

    async def load(self, path: str) -> Optional[bytes]:
        """Load content from local filesystem."""
        full_path = self._get_full_path(path)
        if not full_path.is_file():
            return None

        try:
            async with aiofiles.open(full_path, 'rb') as f:
                return await f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error(f"Error loading file {path}: {e}", exc_info=True)
            raise StorageError("load", f"{path}: {e}") from e

    async def exists(self, path: str) -> bool:
        """Check if file or directory exists."""
        return await aiofiles.os.path.exists(self._get_full_path(path))

    async def delete(self, path: str) -> bool:
        """Delete file from local filesystem."""
        full_path = self._get_full_path(path)
        try:
            await aiofiles.os.remove(full_path)
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Error deleting file {path}: {e}", exc_info=True)
            raise StorageError("delete", f"{path}: {e}") from e

    async def delete_tree(self, path: str) -> bool:
        """Delete a directory recursively."""
        full_path = self._get_full_path(path)
        if full_path == self.base_dir:
            raise StorageError("delete_tree", "refusing to delete the storage root")
        if not full_path.is_dir():
            return False

        try:
            await asyncio.to_thread(shutil.rmtree, full_path)
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Error deleting directory {path}: {e}", exc_info=True)
            raise StorageError("delete_tree", f"{path}: {e}") from e

    async def list(
        self,
        path: str,
        pattern: Optional[str] = None,
        recursive: bool = False
    ) -> List[str]:
        """List files in directory."""
        full_path = self._get_full_path(path)
        if not full_path.exists():
            return []

        try:
            if pattern:
                if recursive:
                    glob_pattern = str(full_path / "**" / pattern)
                    files = glob_module.glob(glob_pattern, recursive=True)
                else:
                    glob_pattern = str(full_path / pattern)
                    files = glob_module.glob(glob_pattern)
            else:
                if recursive:
                    files = [str(p) for p in full_path.rglob("*") if p.is_file()]
                else:
                    files = [str(p) for p in full_path.glob("*") if p.is_file()]
        except OSError as e:
            logger.error(f"Error listing files in {path}: {e}", exc_info=True)
            raise StorageError("list", f"{path}: {e}") from e

        # Convert to relative paths
        return sorted(
            str(Path(file_path).relative_to(self.base_dir)) for file_path in files
        )

    async def append(self, path: str, content: str) -> None:
        """Append content to existing file."""
        full_path = self._get_full_path(path)
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)

            async with aiofiles.open(full_path, 'a', encoding='utf-8') as f:
                await f.write(content)
        except OSError as e:
            logger.error(f"Error appending to file {path}: {e}", exc_info=True)
            raise StorageError("append", f"{path}: {e}") from e
