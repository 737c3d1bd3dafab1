"""
Storage Interface - Abstract base class for document storage backends.
"""

from abc import ABC, abstractmethod
from typing import Optional, List


class StorageInterface(ABC):
    """
    Contract for the byte-level storage the record stores build on.
    Paths are relative, slash-separated keys (e.g. "temporary_chats/temp_x.json").
    """

    @abstractmethod
    async def save(self, path: str, content: bytes | str) -> bool:
        """
        Save content to the specified path, replacing any previous content.

        Returns:
            bool: True if save was successful, False otherwise
        """
        pass

    @abstractmethod
    async def load(self, path: str) -> Optional[bytes]:
        """
        Load content from the specified path.

        Returns:
            Optional[bytes]: File content, or None if it doesn't exist
        """
        pass

    @abstractmethod
    async def exists(self, path: str) -> bool:
        pass

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """
        Delete the file at the specified path.

        Returns:
            bool: True if a file was deleted, False if there was nothing to delete
        """
        pass

    @abstractmethod
    async def list(self, path: str, pattern: Optional[str] = None) -> List[str]:
        """
        List files directly inside a directory.

        Args:
            path: Directory path to list
            pattern: Optional glob pattern to filter files (e.g., "*.json")

        Returns:
            List[str]: Sorted relative file paths
        """
        pass
