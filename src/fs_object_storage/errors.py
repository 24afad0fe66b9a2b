"""Translation of object storage failures into filesystem-style errors."""

import socket
from types import MappingProxyType

from fs_object_storage.exceptions import FileSystemError
from fs_object_storage.models import ErrorInfo

_NOT_FOUND = ErrorInfo(code="ENOENT", errno=-2, description="no such file or directory")
_ACCESS_DENIED = ErrorInfo(code="EACCES", errno=-13, description="permission denied")
_INVALID = ErrorInfo(code="EINVAL", errno=-22, description="invalid argument")
_EXISTS = ErrorInfo(code="EEXIST", errno=-17, description="file already exists")
_NAME_TOO_LONG = ErrorInfo(code="ENAMETOOLONG", errno=-36, description="file name too long")
_DNS = ErrorInfo(code="ENOTFOUND", errno=-3008, description="getaddrinfo ENOTFOUND")
_REFUSED = ErrorInfo(code="ECONNREFUSED", errno=-61, description="connect ECONNREFUSED")
_TIMED_OUT = ErrorInfo(code="ETIMEDOUT", errno=-60, description="operation timed out")
_UNKNOWN = ErrorInfo(code="EIO", errno=-5, description="input/output error")

ERROR_MAPPING = MappingProxyType(
    {
        "NoSuchKey": _NOT_FOUND,
        "NoSuchBucket": _NOT_FOUND,
        "NoSuchObject": _NOT_FOUND,
        "NotFound": _NOT_FOUND,
        "ResourceNotFound": _NOT_FOUND,
        "BucketNotFound": _NOT_FOUND,
        "AccessDenied": _ACCESS_DENIED,
        "InvalidBucketName": _INVALID,
        "InvalidObjectName": _INVALID,
        "InvalidPath": _INVALID,
        "BucketAlreadyExists": _EXISTS,
        "BucketAlreadyOwnedByYou": _EXISTS,
        "KeyTooLong": _NAME_TOO_LONG,
        "ENOTFOUND": _DNS,
        "ECONNREFUSED": _REFUSED,
        "ETIMEDOUT": _TIMED_OUT,
        "Unknown": _UNKNOWN,
    }
)

STANDARD_ERRORS = MappingProxyType(
    {
        "ENOENT": _NOT_FOUND,
        "EACCES": _ACCESS_DENIED,
        "EEXIST": _EXISTS,
        "EINVAL": _INVALID,
        "ENAMETOOLONG": _NAME_TOO_LONG,
        "ENOTEMPTY": ErrorInfo(code="ENOTEMPTY", errno=-39, description="directory not empty"),
        "EBUSY": ErrorInfo(code="EBUSY", errno=-16, description="resource busy or locked"),
        "EFBIG": ErrorInfo(code="EFBIG", errno=-27, description="file too large"),
    }
)

# Checked in order; socket.gaierror must precede its OSError relatives.
_EXCEPTION_TYPES = (
    (socket.gaierror, "ENOTFOUND"),
    (ConnectionRefusedError, "ECONNREFUSED"),
    (TimeoutError, "ETIMEDOUT"),
)

_MESSAGE_PATTERNS = (
    (("key does not exist", "NoSuchKey", "Not Found"), "NoSuchKey"),
    (("bucket does not exist", "NoSuchBucket"), "NoSuchBucket"),
    (("access denied", "Access Denied", "AccessDenied"), "AccessDenied"),
    # Raised by the minio client itself, before any request is sent.
    (("bucket name", "Bucket name"), "InvalidBucketName"),
    (("object name", "Object name"), "InvalidObjectName"),
    (("ENOTFOUND", "Name or service not known", "nodename nor servname"), "ENOTFOUND"),
    (("ECONNREFUSED", "Connection refused"), "ECONNREFUSED"),
    (("timeout", "timed out", "ETIMEDOUT"), "ETIMEDOUT"),
)


def _classify(error: BaseException) -> ErrorInfo | None:
    code = getattr(error, "code", None)
    if isinstance(code, str) and code in ERROR_MAPPING:
        return ERROR_MAPPING[code]

    for exception_type, mapped in _EXCEPTION_TYPES:
        if isinstance(error, exception_type):
            return ERROR_MAPPING[mapped]

    message = str(error)
    for patterns, mapped in _MESSAGE_PATTERNS:
        if any(pattern in message for pattern in patterns):
            return ERROR_MAPPING[mapped]
    return None


def _format_message(code: str, description: str, path: str | None, syscall: str) -> str:
    if path:
        return f"{code}: {description}, {syscall} '{path}'"
    return f"{code}: {description}"


def convert_error(
    error: BaseException, path: str | None = None, syscall: str | None = None
) -> FileSystemError:
    """
    Converts a backend failure into a filesystem-style error.

    Errors that already carry both ``code`` and ``errno`` are returned as-is.
    Otherwise the error is classified by its ``code`` attribute, then its
    exception type, then its message, falling back to ``EIO``.

    Args:
        error: The original exception.
        path: The filesystem path the operation targeted.
        syscall: The filesystem call that failed. Defaults to ``"open"``.

    Returns:
        A FileSystemError whose ``cause`` is the original exception.
    """
    if getattr(error, "code", None) and getattr(error, "errno", None) is not None:
        return error

    syscall = syscall or "open"
    info = _classify(error)
    if info is None:
        original = str(error) or type(error).__name__
        description = f"{_UNKNOWN.description} ({original})"
        info = _UNKNOWN
    else:
        description = info.description

    fs_error = FileSystemError(
        code=info.code,
        errno=info.errno,
        message=_format_message(info.code, description, path, syscall),
        path=path,
        syscall=syscall,
        cause=error,
    )
    fs_error.__cause__ = error
    return fs_error


def create_error(code: str, path: str | None = None, syscall: str = "open") -> FileSystemError:
    """
    Creates a filesystem-style error for a condition detected locally.

    Unknown codes keep the caller's code string with the ``EIO`` errno and
    description.
    """
    info = STANDARD_ERRORS.get(code) or ERROR_MAPPING.get(code) or _UNKNOWN
    return FileSystemError(
        code=code,
        errno=info.errno,
        message=_format_message(code, info.description, path, syscall),
        path=path,
        syscall=syscall,
    )


def is_not_found_error(error: object) -> bool:
    return getattr(error, "code", None) == "ENOENT"


def is_access_denied_error(error: object) -> bool:
    return getattr(error, "code", None) == "EACCES"


def is_exists_error(error: object) -> bool:
    return getattr(error, "code", None) == "EEXIST"
