"""Abstract interface for filesystem-style storage operations."""

from abc import ABC, abstractmethod
from typing import Any, BinaryIO

from fs_object_storage.models import Dirent, Stats


class FileSystem(ABC):
    """Abstract base class for asynchronous filesystem-compatible backends."""

    @abstractmethod
    async def read_file(self, path: str, encoding: str | None = None) -> bytes | str:
        """
        Reads a whole file.

        Args:
            path: The file path.
            encoding: Decode the content with this encoding when given.

        Returns:
            The file contents as bytes, or as text when an encoding is given.

        Raises:
            FileSystemError: ENOENT if the file does not exist.
        """

    @abstractmethod
    async def write_file(self, path: str, data: Any, encoding: str = "utf-8") -> None:
        """
        Writes a whole file, replacing any existing content.

        Args:
            path: The file path.
            data: Text, bytes or a readable stream.
            encoding: Encoding applied to text data.

        Raises:
            FileSystemError: If the upload fails.
        """

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """
        Checks whether a file or directory exists.

        Raises:
            FileSystemError: For any failure other than "not found".
        """

    @abstractmethod
    async def stat(self, path: str) -> Stats:
        """
        Returns the metadata of a file or directory.

        Raises:
            FileSystemError: ENOENT if nothing exists at the path.
        """

    @abstractmethod
    async def unlink(self, path: str) -> None:
        """
        Deletes a file.

        Raises:
            FileSystemError: ENOENT if the file does not exist.
        """

    @abstractmethod
    async def copy_file(self, src_path: str, dest_path: str) -> None:
        """
        Copies a file.

        Raises:
            FileSystemError: ENOENT if the source does not exist.
        """

    @abstractmethod
    async def readdir(self, path: str, with_file_types: bool = False) -> list[str] | list[Dirent]:
        """
        Lists the direct children of a directory.

        Args:
            path: The directory path.
            with_file_types: Return Dirent entries instead of names.

        Returns:
            Sorted child names, or Dirent entries.
        """

    @abstractmethod
    async def mkdir(self, path: str, recursive: bool = False) -> None:
        """
        Creates a directory.

        Args:
            path: The directory path.
            recursive: Create missing parents and ignore existing directories.

        Raises:
            FileSystemError: EEXIST if the directory exists and recursive is off.
        """

    @abstractmethod
    async def rmdir(self, path: str) -> None:
        """
        Removes an empty directory.

        Raises:
            FileSystemError: ENOTEMPTY if the directory still has entries.
        """

    @abstractmethod
    async def create_read_stream(self, path: str) -> BinaryIO:
        """
        Opens a file for sequential reading.

        Raises:
            FileSystemError: ENOENT if the file does not exist.
        """

    @abstractmethod
    def create_write_stream(self, path: str) -> BinaryIO:
        """
        Opens a file for sequential writing.

        The stream is returned immediately; its content is stored once it is
        closed. Failures tear the stream down instead of being raised here.
        """
