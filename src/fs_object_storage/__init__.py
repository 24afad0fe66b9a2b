from fs_object_storage.config import MinioConfig, load_config
from fs_object_storage.errors import (
    convert_error,
    create_error,
    is_access_denied_error,
    is_exists_error,
    is_not_found_error,
)
from fs_object_storage.exceptions import (
    FileSystemError,
    InvalidPathError,
    StreamError,
    UnsupportedDataError,
)
from fs_object_storage.interfaces import FileSystem
from fs_object_storage.logging import setup_logging
from fs_object_storage.minio import get_minio_client
from fs_object_storage.models import Dirent, FileKind, ListPrefix, ObjectLocation, Stats
from fs_object_storage.paths import PathConverter
from fs_object_storage.storage import ObjectStorage, ObjectWriteStream

__all__ = [
    "ObjectStorage",
    "ObjectWriteStream",
    "FileSystem",
    "PathConverter",
    "MinioConfig",
    "load_config",
    "get_minio_client",
    "setup_logging",
    "convert_error",
    "create_error",
    "is_not_found_error",
    "is_access_denied_error",
    "is_exists_error",
    "FileSystemError",
    "InvalidPathError",
    "StreamError",
    "UnsupportedDataError",
    "Dirent",
    "FileKind",
    "ListPrefix",
    "ObjectLocation",
    "Stats",
]
