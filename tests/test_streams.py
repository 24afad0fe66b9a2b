"""Tests for payload and stream adapters."""

import io

import pytest

from fakes import FakeResponse
from fs_object_storage.exceptions import FileSystemError, StreamError, UnsupportedDataError
from fs_object_storage.streams import (
    ObjectReadStream,
    PassThroughStream,
    bytes_to_string,
    create_pass_through_stream,
    get_data_size,
    is_stream,
    limit_stream_size,
    normalize_data,
    pipe_stream,
    stream_to_bytes,
    stream_to_string,
    string_to_stream,
    to_readable_stream,
)


class FailingStream:
    def __init__(self, first_chunk: bytes, error: Exception):
        self._chunks = [first_chunk]
        self._error = error

    def read(self, size=-1):
        if self._chunks:
            return self._chunks.pop()
        raise self._error


class TestToReadableStream:
    def test_text_is_utf8_encoded(self):
        assert to_readable_stream("test string").read() == b"test string"
        assert to_readable_stream("héllo").read() == "héllo".encode("utf-8")

    def test_bytes(self):
        assert to_readable_stream(b"test buffer").read() == b"test buffer"

    def test_stream_returned_unchanged(self):
        stream = io.BytesIO(b"data")

        assert to_readable_stream(stream) is stream

    def test_unsupported_type(self):
        with pytest.raises(UnsupportedDataError, match="int"):
            to_readable_stream(42)

    def test_is_stream(self):
        assert is_stream(io.BytesIO()) is True
        assert is_stream(b"data") is False


class TestStreamToBytes:
    def test_collects_all_chunks(self):
        assert stream_to_bytes(io.BytesIO(b"abcdefgh"), chunk_size=3) == b"abcdefgh"

    def test_empty_stream(self):
        assert stream_to_bytes(io.BytesIO(b"")) == b""

    def test_iterable_of_chunks(self):
        assert stream_to_bytes([b"chunk1", b"chunk2"]) == b"chunk1chunk2"

    def test_failure_propagates_with_original_message(self):
        stream = FailingStream(b"partial", OSError("Stream error"))

        with pytest.raises(OSError, match="Stream error"):
            stream_to_bytes(stream)

    def test_stream_to_string(self):
        assert stream_to_string(string_to_stream("Hello, World!")) == "Hello, World!"


class TestGetDataSize:
    def test_text_counts_encoded_bytes(self):
        assert get_data_size("test") == 4
        assert get_data_size("é") == 2

    def test_bytes_like(self):
        assert get_data_size(b"test") == 4
        assert get_data_size(bytearray(b"abc")) == 3
        assert get_data_size(memoryview(b"abcde")) == 5

    def test_stream_size_is_unknown(self):
        assert get_data_size(io.BytesIO(b"abc")) is None

    def test_unsupported_type(self):
        with pytest.raises(UnsupportedDataError):
            get_data_size(3.14)


class TestNormalizeData:
    def test_bytes_returned_as_same_object(self):
        data = b"payload"

        assert normalize_data(data) is data

    def test_text_and_none(self):
        assert normalize_data("text") == b"text"
        assert normalize_data(None) == b""

    def test_bytes_to_string(self):
        assert bytes_to_string(b"caf\xc3\xa9") == "café"


class TestPassThroughStream:
    def test_close_resolves_completion_with_content(self):
        stream, completion = create_pass_through_stream()

        stream.write(b"Hello, ")
        stream.write(bytearray(b"World!"))
        stream.close()

        assert completion.result(timeout=0) == b"Hello, World!"

    def test_write_after_close_fails(self):
        stream = PassThroughStream()
        stream.close()

        with pytest.raises(ValueError):
            stream.write(b"late")

    def test_destroy_fails_completion_and_later_writes(self):
        stream = PassThroughStream()
        error = RuntimeError("upload failed")

        stream.destroy(error)

        assert stream.destroyed is True
        assert stream.completion.exception(timeout=0) is error
        with pytest.raises(RuntimeError, match="upload failed"):
            stream.write(b"more")

    def test_first_destroy_error_wins(self):
        stream = PassThroughStream()
        first = RuntimeError("first")

        stream.destroy(first)
        stream.destroy(RuntimeError("second"))

        assert stream.error is first


class TestPipeStream:
    def test_copies_everything(self):
        destination = io.BytesIO()

        pipe_stream(io.BytesIO(b"x" * 100), destination, chunk_size=7)

        assert destination.getvalue() == b"x" * 100

    def test_failure_is_wrapped(self):
        destination = io.BytesIO()
        destination.close()

        with pytest.raises(StreamError, match="Stream pipeline failed") as exc_info:
            pipe_stream(io.BytesIO(b"data"), destination)

        assert isinstance(exc_info.value.cause, ValueError)


class TestLimitStreamSize:
    def test_within_limit(self):
        assert b"".join(limit_stream_size(io.BytesIO(b"abcdef"), 6, chunk_size=4)) == b"abcdef"

    def test_exceeding_limit_raises_efbig(self):
        chunks = limit_stream_size(io.BytesIO(b"x" * 10), 5, chunk_size=4)

        assert next(chunks) == b"xxxx"
        with pytest.raises(FileSystemError) as exc_info:
            next(chunks)

        assert exc_info.value.code == "EFBIG"
        assert exc_info.value.errno == -27


class TestObjectReadStream:
    def test_reads_response_content(self):
        stream = ObjectReadStream(FakeResponse(b"object body"))

        assert stream.read(6) == b"object"
        assert stream.read() == b" body"

    def test_close_releases_connection(self):
        response = FakeResponse(b"data")
        stream = ObjectReadStream(response)

        stream.close()
        stream.close()

        assert stream.closed is True
        assert response.closed is True
        assert response.released is True
