"""Custom exceptions for the fs-object-storage package."""


class FileSystemError(Exception):
    """Raised when a filesystem-style operation fails.

    Mirrors the fields of a conventional filesystem error so callers can
    branch on ``error.code`` (``"ENOENT"``, ``"EACCES"``, ...).
    """

    def __init__(
        self,
        code: str,
        errno: int,
        message: str,
        path: str | None = None,
        syscall: str | None = None,
        cause: Exception | None = None,
    ):
        self.code = code
        self.errno = errno
        self.message = message
        self.path = path
        self.syscall = syscall
        self.cause = cause
        super().__init__(message)


class InvalidPathError(ValueError):
    """Raised when a path cannot be mapped to an object key."""

    def __init__(self, path: object, reason: str, code: str = "InvalidPath"):
        self.path = path
        self.reason = reason
        self.code = code
        super().__init__(f"Invalid path '{path}': {reason}")


class UnsupportedDataError(TypeError):
    """Raised when a payload is neither text, bytes nor a readable stream."""

    def __init__(self, data: object):
        self.data_type = type(data).__name__
        super().__init__(f"Unsupported data type for stream conversion: {self.data_type}")


class StreamError(Exception):
    """Raised when copying between streams fails."""

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        super().__init__(f"Stream pipeline failed: {message}")
