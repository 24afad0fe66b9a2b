"""Conversion between filesystem paths and object storage bucket/key pairs.

Paths look like ``/bucket/dir/file.txt`` when the bucket is part of the path,
or ``/dir/file.txt`` when a ``PathConverter`` is bound to one bucket. A
trailing slash marks a directory; directories themselves are simulated with
zero-byte marker objects whose key ends in the separator.
"""

import posixpath
import re

from fs_object_storage.exceptions import InvalidPathError
from fs_object_storage.models import ListPrefix, ObjectLocation

MAX_KEY_BYTES = 1024

_INVALID_CHARS = re.compile(r'[<>:"|?*\x00-\x1f]')
_REPEATED_SLASHES = re.compile(r"/{2,}")


def normalize_path(path: str) -> str:
    """
    Normalizes a filesystem path.

    Collapses repeated slashes, resolves ``.`` and ``..`` lexically, ensures a
    single leading slash and strips a trailing slash unless the result is the
    root. An empty path normalizes to ``/``.
    """
    if not path:
        return "/"
    return posixpath.normpath("/" + _REPEATED_SLASHES.sub("/", path).lstrip("/"))


def split_path(path: str) -> ObjectLocation:
    """
    Splits a path into its bucket (first segment) and key (the rest).

    Args:
        path: A path such as ``/bucket/path/to/file.txt``. The leading slash
            is optional.

    Returns:
        ObjectLocation with an empty bucket and key for the root path.
    """
    normalized = normalize_path(path)
    if normalized == "/":
        return ObjectLocation(bucket="", key="")
    bucket, _, key = normalized[1:].partition("/")
    return ObjectLocation(bucket=bucket, key=key)


def join_path(bucket: str, key: str) -> str:
    """Joins a bucket and key back into a normalized path."""
    key = (key or "").lstrip("/")
    if bucket and key:
        joined = f"/{bucket}/{key}"
    elif bucket:
        joined = f"/{bucket}"
    elif key:
        joined = f"/{key}"
    else:
        joined = "/"
    return normalize_path(joined)


def is_directory(path: str) -> bool:
    """True for the root and for any path written with a trailing slash."""
    return normalize_path(path) == "/" or path.endswith("/")


def get_parent_path(path: str) -> str:
    """Returns the lexical parent; the root is its own parent."""
    return posixpath.dirname(normalize_path(path))


def get_basename(path: str) -> str:
    """Returns the last path segment, or an empty string for the root."""
    normalized = normalize_path(path)
    if normalized == "/":
        return ""
    return posixpath.basename(normalized)


class PathConverter:
    """
    Maps filesystem paths to object locations.

    With ``bucket`` set, every path addresses that bucket and a leading
    segment repeating the bucket name is dropped. Without it, the first path
    segment names the bucket. An optional ``prefix`` is prepended to every key.
    """

    def __init__(self, bucket: str | None = None, prefix: str = "", separator: str = "/"):
        if not separator:
            raise ValueError("separator must not be empty")
        self._bucket = bucket or None
        self._prefix = (prefix or "").lstrip(separator)
        self._separator = separator
        self._repeated_separators = re.compile(f"(?:{re.escape(separator)}){{2,}}")

    @property
    def bucket(self) -> str | None:
        return self._bucket

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def separator(self) -> str:
        return self._separator

    def path_to_minio_key(self, path: str) -> ObjectLocation:
        """
        Converts a filesystem path to the bucket and object key it addresses.

        A trailing slash on the path is kept on the key, so directory paths
        map onto directory marker keys.

        Raises:
            InvalidPathError: In bucket-in-path mode, if the path names no bucket.
        """
        bucket, relative = self._split_relative(path)
        if not bucket:
            raise InvalidPathError(path, "path does not name a bucket")

        relative = relative.replace("/", self._separator)
        if self._prefix:
            key = self._prefix + self._separator + relative
        else:
            key = relative
        key = self._repeated_separators.sub(self._separator, key)
        return ObjectLocation(bucket=bucket, key=key)

    def minio_to_path(self, bucket: str, key: str) -> str:
        """Converts a bucket and key back to an absolute filesystem path."""
        return join_path(bucket, key)

    def get_list_prefix(self, path: str) -> ListPrefix:
        """Returns the listing prefix matching only the direct content of a directory."""
        location = self.path_to_minio_key(path)
        prefix = location.key
        if prefix and not prefix.endswith(self._separator):
            prefix += self._separator
        return ListPrefix(bucket=location.bucket, prefix=prefix)

    def create_directory_marker(self, path: str) -> ObjectLocation:
        """Returns the location of the marker object for a directory path."""
        return self.path_to_minio_key(self.to_directory_path(path))

    def to_directory_path(self, path: str) -> str:
        normalized = normalize_path(path)
        return normalized if normalized.endswith("/") else normalized + "/"

    def is_directory_path(self, path: str) -> bool:
        return path.endswith(self._separator)

    def is_root(self, path: str) -> bool:
        """True if the path addresses the top of a bucket in the active mode."""
        if normalize_path(path) == "/":
            return True
        _, relative = self._split_relative(path)
        return not relative.strip("/")

    def get_file_name(self, path: str) -> str:
        return posixpath.basename(path)

    def normalize_path(self, path: str) -> str:
        return normalize_path(path)

    def get_parent_path(self, path: str) -> str:
        return get_parent_path(path)

    def get_basename(self, path: str) -> str:
        return get_basename(path)

    def validate_path(self, path: str) -> None:
        """
        Checks that a path can be stored as an object key.

        Raises:
            InvalidPathError: If the path is empty or not a string, contains
                control characters or any of ``< > : " | ? *``, or maps to a
                key longer than 1024 bytes once UTF-8 encoded.
        """
        if not path or not isinstance(path, str):
            raise InvalidPathError(path, "path must be a non-empty string")
        if _INVALID_CHARS.search(path):
            raise InvalidPathError(path, "path contains invalid characters")

        location = self.path_to_minio_key(path)
        if len(location.key.encode("utf-8")) > MAX_KEY_BYTES:
            raise InvalidPathError(
                path,
                f"path too long (exceeds {MAX_KEY_BYTES} bytes when converted to key)",
                code="KeyTooLong",
            )

    def _split_relative(self, path: str) -> tuple[str, str]:
        """Returns the bucket and the bucket-relative path, trailing slash kept."""
        normalized = normalize_path(path)
        trailing = normalized != "/" and path.endswith("/")
        relative = normalized.lstrip("/")

        if self._bucket is None:
            bucket, _, relative = relative.partition("/")
        else:
            bucket = self._bucket
            if relative == bucket:
                relative = ""
            elif relative.startswith(bucket + "/"):
                relative = relative[len(bucket) + 1 :]

        if trailing and relative:
            relative += "/"
        return bucket, relative
