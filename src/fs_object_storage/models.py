"""Value types shared by the path, error and storage layers."""

import math
from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class ObjectLocation(BaseModel, frozen=True):
    """A bucket/key pair derived from a filesystem path."""

    bucket: str
    key: str


class ListPrefix(BaseModel, frozen=True):
    """A bucket and the key prefix that lists one virtual directory."""

    bucket: str
    prefix: str


class ErrorInfo(BaseModel, frozen=True):
    """One row of the filesystem error table."""

    code: str
    errno: int
    description: str


class FileKind(str, Enum):
    """The only two kinds of entry object storage can report."""

    FILE = "file"
    DIRECTORY = "directory"


class _KindPredicates:
    """Predicate methods shared by Stats and Dirent."""

    def is_file(self) -> bool:
        return self.kind == FileKind.FILE

    def is_directory(self) -> bool:
        return self.kind == FileKind.DIRECTORY

    def is_block_device(self) -> bool:
        return False

    def is_character_device(self) -> bool:
        return False

    def is_symbolic_link(self) -> bool:
        return False

    def is_fifo(self) -> bool:
        return False

    def is_socket(self) -> bool:
        return False


class Stats(_KindPredicates, BaseModel, frozen=True):
    """Stat result projected from object metadata."""

    kind: FileKind
    size: int = 0
    mtime: datetime | None = None
    etag: str | None = None
    mode: int = 0o644
    uid: int = 0
    gid: int = 0
    dev: int = 0
    ino: int = 0
    nlink: int = 1
    rdev: int = 0
    blksize: int = 4096

    @property
    def atime(self) -> datetime | None:
        return self.mtime

    @property
    def ctime(self) -> datetime | None:
        return self.mtime

    @property
    def birthtime(self) -> datetime | None:
        return self.mtime

    @property
    def blocks(self) -> int:
        return math.ceil(self.size / 512)

    @classmethod
    def for_file(
        cls, size: int, mtime: datetime | None, etag: str | None = None
    ) -> "Stats":
        """Builds the stats of a regular object."""
        return cls(kind=FileKind.FILE, size=size, mtime=mtime, etag=etag)

    @classmethod
    def for_directory(cls, mtime: datetime | None = None) -> "Stats":
        """Builds the stats of a virtual directory."""
        return cls(kind=FileKind.DIRECTORY, mtime=mtime, mode=0o755)


class Dirent(_KindPredicates, BaseModel, frozen=True):
    """A directory entry returned by readdir(with_file_types=True)."""

    name: str
    kind: FileKind
