"""
Storage Interface - Abstract base class for blob storage implementations.
The conversation store is written against this interface so the
underlying medium (local disk today, S3/OSS later) can be swapped.
"""

from abc import ABC, abstractmethod
from typing import Optional, List


class StorageInterface(ABC):
    """
    Abstract blob storage contract.

    Implementations raise StorageError on I/O failure; they never report
    failure through a return value.
    """

    @abstractmethod
    async def save(self, path: str, content: bytes | str) -> None:
        """
        Save content to the specified path, replacing any existing content.

        Args:
            path: Relative path (e.g., "sessions/abc/session.json")
            content: Bytes for binary files or str for text
        """
        pass

    @abstractmethod
    async def load(self, path: str) -> Optional[bytes]:
        """
        Load content from the specified path.

        Args:
            path: Relative path to load from

        Returns:
            Optional[bytes]: File content, or None if the file doesn't exist
        """
        pass

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check if a file or directory exists at the specified path."""
        pass

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """
        Delete the file at the specified path.

        Returns:
            bool: True if a file was removed, False if nothing was there
        """
        pass

    @abstractmethod
    async def delete_tree(self, path: str) -> bool:
        """
        Delete a directory and everything below it.

        Returns:
            bool: True if a directory was removed, False if nothing was there
        """
        pass

    @abstractmethod
    async def list(
        self,
        path: str,
        pattern: Optional[str] = None,
        recursive: bool = False
    ) -> List[str]:
        """
        List files in the specified directory.

        Args:
            path: Directory path to list
            pattern: Optional glob pattern to filter files (e.g., "*.json")
            recursive: Whether to list files recursively

        Returns:
            List[str]: Sorted relative file paths; empty if the directory is missing
        """
        pass

    @abstractmethod
    async def append(self, path: str, content: str) -> None:
        """
        Append text to a file, creating it if needed.

        Args:
            path: File path
            content: Content to append
        """
        pass
