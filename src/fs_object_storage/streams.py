"""Adapters between in-memory payloads and sequential byte streams.

A stream here is anything with a callable ``read`` method: file objects,
``io.BytesIO`` and the HTTP responses returned by ``Minio.get_object``.
"""

import io
import shutil
from collections.abc import Iterator
from concurrent.futures import Future
from typing import Any, BinaryIO

from fs_object_storage.errors import create_error
from fs_object_storage.exceptions import StreamError, UnsupportedDataError

DEFAULT_CHUNK_SIZE = 64 * 1024

_BYTES_TYPES = (bytes, bytearray, memoryview)


def is_stream(data: Any) -> bool:
    return callable(getattr(data, "read", None))


def to_readable_stream(data: Any, encoding: str = "utf-8") -> BinaryIO:
    """
    Wraps text or bytes in a readable stream; streams are returned unchanged.

    Raises:
        UnsupportedDataError: If the data is neither text, bytes nor a stream.
    """
    if is_stream(data):
        return data
    if isinstance(data, str):
        return io.BytesIO(data.encode(encoding))
    if isinstance(data, _BYTES_TYPES):
        return io.BytesIO(data)
    raise UnsupportedDataError(data)


def iter_chunks(stream: Any, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
    """Yields the chunks of a stream, or of an iterable of byte chunks, until exhausted."""
    if not is_stream(stream):
        yield from stream
        return
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        yield chunk


def stream_to_bytes(stream: Any, chunk_size: int = DEFAULT_CHUNK_SIZE) -> bytes:
    """
    Consumes a stream to completion and returns everything it produced.

    Failures raised by the stream propagate unchanged. An empty stream yields
    ``b""``.
    """
    return b"".join(iter_chunks(stream, chunk_size))


def stream_to_string(stream: Any, encoding: str = "utf-8") -> str:
    return stream_to_bytes(stream).decode(encoding)


def get_data_size(data: Any, encoding: str = "utf-8") -> int | None:
    """
    Returns the exact byte length of a payload.

    Text is measured after encoding, not by character count. Streams return
    None: their length is unknown until consumed, so uploads of them must
    use multipart transfer.

    Raises:
        UnsupportedDataError: If the data is neither text, bytes nor a stream.
    """
    if isinstance(data, str):
        return len(data.encode(encoding))
    if isinstance(data, memoryview):
        return data.nbytes
    if isinstance(data, (bytes, bytearray)):
        return len(data)
    if is_stream(data):
        return None
    raise UnsupportedDataError(data)


def normalize_data(data: Any, encoding: str = "utf-8") -> bytes:
    """Coerces a payload to bytes; bytes input is returned as the same object."""
    if data is None:
        return b""
    if isinstance(data, bytes):
        return data
    if isinstance(data, str):
        return data.encode(encoding)
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    raise UnsupportedDataError(data)


def string_to_bytes(text: str, encoding: str = "utf-8") -> bytes:
    return text.encode(encoding)


def bytes_to_string(data: bytes, encoding: str = "utf-8") -> str:
    return bytes(data).decode(encoding)


def string_to_stream(text: str, encoding: str = "utf-8") -> BinaryIO:
    return io.BytesIO(text.encode(encoding))


def bytes_to_stream(data: bytes) -> BinaryIO:
    return io.BytesIO(data)


def pipe_stream(source: BinaryIO, destination: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
    """
    Copies a readable stream into a writable one.

    Raises:
        StreamError: If reading or writing fails.
    """
    try:
        shutil.copyfileobj(source, destination, chunk_size)
    except Exception as e:
        raise StreamError(str(e), cause=e) from e


def limit_stream_size(source: Any, max_size: int, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
    """
    Yields the chunks of a stream while their total stays within ``max_size``.

    Raises:
        FileSystemError: With code ``EFBIG`` once the limit is exceeded.
    """
    total = 0
    for chunk in iter_chunks(source, chunk_size):
        total += len(chunk)
        if total > max_size:
            raise create_error("EFBIG", syscall="read")
        yield chunk


class PassThroughStream(io.RawIOBase):
    """
    Writable sink that buffers everything written to it.

    ``completion`` resolves with the concatenated bytes when the stream is
    closed, or fails with the error passed to ``destroy``.
    """

    def __init__(self):
        super().__init__()
        self._chunks: list[bytes] = []
        self._error: BaseException | None = None
        self.completion: Future = Future()

    @property
    def error(self) -> BaseException | None:
        return self._error

    @property
    def destroyed(self) -> bool:
        return self._error is not None

    def writable(self) -> bool:
        return True

    def write(self, data) -> int:
        if self._error is not None:
            raise self._error
        if self.closed:
            raise ValueError("I/O operation on closed stream")
        chunk = bytes(data)
        self._chunks.append(chunk)
        return len(chunk)

    def getvalue(self) -> bytes:
        return b"".join(self._chunks)

    def close(self) -> None:
        if not self.closed and not self.completion.done():
            self.completion.set_result(self.getvalue())
        super().close()

    def destroy(self, error: BaseException) -> None:
        """Tears the stream down; later writes raise ``error``."""
        if self._error is None:
            self._error = error
        if not self.completion.done():
            self.completion.set_exception(error)
        super().close()


def create_pass_through_stream() -> tuple[PassThroughStream, Future]:
    """Returns a buffering sink and the future resolved with its content on close."""
    stream = PassThroughStream()
    return stream, stream.completion


class ObjectReadStream(io.RawIOBase):
    """Read-only stream over a ``Minio.get_object`` response."""

    def __init__(self, response: Any):
        super().__init__()
        self._response = response

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        data = self._response.read(len(buffer))
        size = len(data)
        buffer[:size] = data
        return size

    def close(self) -> None:
        if not self.closed:
            try:
                self._response.close()
                self._response.release_conn()
            finally:
                super().close()
