"""MinIO implementation of the FileSystem interface."""

import asyncio
import io
import logging
import mimetypes
from typing import Any, BinaryIO

from minio import Minio
from minio.commonconfig import CopySource

from fs_object_storage.config import DEFAULT_PART_SIZE, MinioConfig
from fs_object_storage.errors import (
    convert_error,
    create_error,
    is_exists_error,
    is_not_found_error,
)
from fs_object_storage.exceptions import FileSystemError
from fs_object_storage.interfaces import FileSystem
from fs_object_storage.minio import get_minio_client
from fs_object_storage.models import Dirent, FileKind, ListPrefix, ObjectLocation, Stats
from fs_object_storage.paths import PathConverter
from fs_object_storage.streams import (
    ObjectReadStream,
    PassThroughStream,
    get_data_size,
    stream_to_bytes,
    to_readable_stream,
)

logger = logging.getLogger(__name__)


class ObjectWriteStream(PassThroughStream):
    """Write stream whose buffered content is uploaded once it is closed."""

    def __init__(self, path: str):
        super().__init__()
        self.path = path
        self.upload_task: asyncio.Task | None = None

    async def wait_uploaded(self) -> None:
        """
        Waits for the background upload of a closed stream to finish.

        Raises:
            FileSystemError: The error the stream was torn down with.
        """
        if self.upload_task is not None:
            await self.upload_task
        if self.error is not None:
            raise self.error


class ObjectStorage(FileSystem):
    """Filesystem-compatible operations on top of MinIO/S3 object storage.

    Blocking MinIO calls run in worker threads through ``asyncio.to_thread``.
    Every operation first makes sure the bucket it touches exists.
    """

    def __init__(
        self,
        client: Minio,
        bucket: str | None = None,
        prefix: str = "",
        separator: str = "/",
        part_size: int = DEFAULT_PART_SIZE,
    ):
        self._client = client
        self._bucket = bucket
        self._path_converter = PathConverter(bucket=bucket, prefix=prefix, separator=separator)
        self._part_size = part_size
        self._initialized_buckets: set[str] = set()
        self._bucket_tasks: dict[str, asyncio.Task] = {}

    @classmethod
    def from_config(cls, config: MinioConfig) -> "ObjectStorage":
        """Builds a client from configuration."""
        client = get_minio_client(
            config.endpoint,
            config.user,
            config.password,
            secure=config.secure,
            region=config.region,
        )
        return cls(
            client,
            bucket=config.bucket_name,
            prefix=config.prefix,
            part_size=config.part_size,
        )

    @property
    def client(self) -> Minio:
        return self._client

    @property
    def bucket(self) -> str | None:
        return self._bucket

    @property
    def path_converter(self) -> PathConverter:
        return self._path_converter

    async def initialize(self) -> None:
        """Ensures the bound bucket exists. A no-op in bucket-in-path mode."""
        if self._bucket:
            await self._ensure_bucket(self._bucket)

    async def read_file(self, path: str, encoding: str | None = None) -> bytes | str:
        try:
            location = await self._prepare_file(path, "open")
            data = await asyncio.to_thread(self._download, location)
            content = data.decode(encoding) if encoding else data
        except Exception as e:
            raise self._fail(e, path, "open")

        logger.debug("File read", extra={"path": path, "size": len(data)})
        return content

    async def write_file(self, path: str, data: Any, encoding: str = "utf-8") -> None:
        try:
            location = await self._prepare_file(path, "open")
            stream = to_readable_stream(data, encoding)
            size = get_data_size(data, encoding)
            await asyncio.to_thread(self._put, location, stream, size)
        except Exception as e:
            raise self._fail(e, path, "open")

        logger.info(
            "File written",
            extra={"path": path, "bucket": location.bucket, "key": location.key, "size": size},
        )

    async def exists(self, path: str) -> bool:
        try:
            await self.stat(path)
            return True
        except FileSystemError as e:
            if is_not_found_error(e):
                return False
            raise

    async def stat(self, path: str) -> Stats:
        try:
            location = await self._prepare(path)
            if self._path_converter.is_root(path):
                return Stats.for_directory()

            info = await self._stat_object(location)
            if info is None:
                if await self._has_children(path):
                    return Stats.for_directory()
                raise create_error("ENOENT", path, "stat")
        except Exception as e:
            raise self._fail(e, path, "stat")

        if location.key.endswith(self._path_converter.separator):
            return Stats.for_directory(mtime=info.last_modified)
        return Stats.for_file(info.size, info.last_modified, info.etag)

    async def unlink(self, path: str) -> None:
        try:
            location = await self._prepare_file(path, "unlink")
            await asyncio.to_thread(self._client.stat_object, location.bucket, location.key)
            await asyncio.to_thread(self._client.remove_object, location.bucket, location.key)
        except Exception as e:
            raise self._fail(e, path, "unlink")

        logger.info("File removed", extra={"path": path, "bucket": location.bucket, "key": location.key})

    async def copy_file(self, src_path: str, dest_path: str) -> None:
        try:
            source = self._locate_file(src_path, "copyfile")
            destination = self._locate_file(dest_path, "copyfile")
            await self._ensure_bucket(source.bucket)
            await self._ensure_bucket(destination.bucket)
            await asyncio.to_thread(
                self._client.copy_object,
                destination.bucket,
                destination.key,
                CopySource(source.bucket, source.key),
            )
        except Exception as e:
            raise self._fail(e, src_path, "copyfile")

        logger.info("File copied", extra={"source": src_path, "destination": dest_path})

    async def readdir(self, path: str, with_file_types: bool = False) -> list[str] | list[Dirent]:
        try:
            await self._prepare(path)
            listing = self._path_converter.get_list_prefix(path)
            objects = await asyncio.to_thread(self._list, listing)
        except Exception as e:
            raise self._fail(e, path, "scandir")

        entries = self._to_entries(objects, listing.prefix)
        names = sorted(entries)
        if with_file_types:
            return [Dirent(name=name, kind=entries[name]) for name in names]
        return names

    async def mkdir(self, path: str, recursive: bool = False) -> None:
        try:
            await self._prepare(path)
        except Exception as e:
            raise self._fail(e, path, "mkdir")

        if self._path_converter.is_root(path):
            if recursive:
                return
            raise create_error("EEXIST", path, "mkdir")

        if recursive:
            # Ancestors are created one at a time, top-most first.
            parent = self._path_converter.get_parent_path(path)
            if not self._path_converter.is_root(parent):
                await self.mkdir(parent, recursive=True)

        try:
            marker = self._path_converter.create_directory_marker(path)
            if await self._stat_object(marker) is not None:
                if recursive:
                    return
                raise create_error("EEXIST", path, "mkdir")
            await asyncio.to_thread(self._put, marker, io.BytesIO(b""), 0)
        except Exception as e:
            raise self._fail(e, path, "mkdir")

        logger.info("Directory created", extra={"path": path, "bucket": marker.bucket, "key": marker.key})

    async def rmdir(self, path: str) -> None:
        try:
            await self._prepare(path)
            if self._path_converter.is_root(path):
                raise create_error("EBUSY", path, "rmdir")
            if await self.readdir(path):
                raise create_error("ENOTEMPTY", path, "rmdir")

            marker = self._path_converter.create_directory_marker(path)
            await asyncio.to_thread(self._client.remove_object, marker.bucket, marker.key)
        except Exception as e:
            raise self._fail(e, path, "rmdir")

        logger.info("Directory removed", extra={"path": path, "bucket": marker.bucket, "key": marker.key})

    async def create_read_stream(self, path: str) -> BinaryIO:
        """
        Opens a file for sequential reading.

        Reads on the returned stream are blocking network calls. From a
        coroutine, read it through ``asyncio.to_thread``.
        """
        try:
            location = await self._prepare_file(path, "open")
            response = await asyncio.to_thread(self._client.get_object, location.bucket, location.key)
        except Exception as e:
            raise self._fail(e, path, "open")
        return ObjectReadStream(response)

    def create_write_stream(self, path: str) -> ObjectWriteStream:
        """
        Opens a file for sequential writing.

        Must be called from a running event loop. The upload runs as a
        background task; await ``wait_uploaded()`` after closing the stream to
        observe its outcome.
        """
        stream = ObjectWriteStream(path)
        stream.upload_task = asyncio.get_running_loop().create_task(self._upload_stream(stream))
        return stream

    async def _upload_stream(self, stream: ObjectWriteStream) -> None:
        try:
            location = await self._prepare_file(stream.path, "open")
            data = await asyncio.wrap_future(stream.completion)
            await asyncio.to_thread(self._put, location, io.BytesIO(data), len(data))
        except Exception as e:
            stream.destroy(self._fail(e, stream.path, "open"))
            return

        logger.info(
            "Stream uploaded",
            extra={"path": stream.path, "bucket": location.bucket, "key": location.key, "size": len(data)},
        )

    async def _ensure_bucket(self, bucket: str) -> None:
        if bucket in self._initialized_buckets:
            return

        task = self._bucket_tasks.get(bucket)
        if task is None:
            task = asyncio.ensure_future(self._create_bucket(bucket))
            self._bucket_tasks[bucket] = task
        try:
            await asyncio.shield(task)
        except Exception:
            # Forget the failed attempt so the next call retries.
            if self._bucket_tasks.get(bucket) is task:
                del self._bucket_tasks[bucket]
            raise
        self._initialized_buckets.add(bucket)

    async def _create_bucket(self, bucket: str) -> None:
        try:
            if await asyncio.to_thread(self._client.bucket_exists, bucket):
                logger.info("Bucket already exists", extra={"bucket": bucket})
                return
            await asyncio.to_thread(self._client.make_bucket, bucket)
            logger.info("Bucket created", extra={"bucket": bucket})
        except Exception as e:
            error = convert_error(e, None, "initialize")
            if is_exists_error(error):
                logger.info("Bucket created concurrently", extra={"bucket": bucket})
                return
            logger.exception("Bucket initialization failed", extra={"bucket": bucket})
            raise error

    def _locate(self, path: str) -> ObjectLocation:
        self._path_converter.validate_path(path)
        return self._path_converter.path_to_minio_key(path)

    async def _prepare(self, path: str) -> ObjectLocation:
        location = self._locate(path)
        await self._ensure_bucket(location.bucket)
        return location

    async def _prepare_file(self, path: str, syscall: str) -> ObjectLocation:
        """Like _prepare, for operations that need a key naming an object."""
        location = self._locate_file(path, syscall)
        await self._ensure_bucket(location.bucket)
        return location

    def _locate_file(self, path: str, syscall: str) -> ObjectLocation:
        location = self._locate(path)
        if not location.key:
            raise create_error("EINVAL", path, syscall)
        return location

    async def _stat_object(self, location: ObjectLocation) -> Any | None:
        """Returns the object's metadata, or None if it does not exist."""
        try:
            return await asyncio.to_thread(self._client.stat_object, location.bucket, location.key)
        except Exception as e:
            if is_not_found_error(convert_error(e)):
                return None
            raise

    async def _has_children(self, path: str) -> bool:
        listing = self._path_converter.get_list_prefix(path)
        objects = await asyncio.to_thread(self._list, listing)
        return bool(objects)

    def _download(self, location: ObjectLocation) -> bytes:
        response = self._client.get_object(location.bucket, location.key)
        try:
            return stream_to_bytes(response)
        finally:
            response.close()
            response.release_conn()

    def _put(self, location: ObjectLocation, data: BinaryIO, size: int | None) -> None:
        content_type = mimetypes.guess_type(location.key)[0] or "application/octet-stream"
        if size is None:
            # Unknown length: multipart upload in part_size chunks.
            self._client.put_object(
                bucket_name=location.bucket,
                object_name=location.key,
                data=data,
                length=-1,
                part_size=self._part_size,
                content_type=content_type,
            )
        else:
            self._client.put_object(
                bucket_name=location.bucket,
                object_name=location.key,
                data=data,
                length=size,
                content_type=content_type,
            )

    def _list(self, listing: ListPrefix) -> list:
        # The server groups by "/" only; other separators are grouped in _to_entries.
        return list(
            self._client.list_objects(
                listing.bucket,
                prefix=listing.prefix or None,
                recursive=self._path_converter.separator != "/",
            )
        )

    def _to_entries(self, objects: list, prefix: str) -> dict[str, FileKind]:
        """Reduces a listing to direct child names and their kinds."""
        separator = self._path_converter.separator
        entries: dict[str, FileKind] = {}
        for obj in objects:
            name = getattr(obj, "object_name", None)
            if not name:
                logger.warning(
                    "Listing entry without a name skipped",
                    extra={"prefix": prefix, "entry": repr(obj)},
                )
                continue

            if prefix and name.startswith(prefix):
                name = name[len(prefix) :]
            if name.endswith(separator) or getattr(obj, "is_dir", False):
                kind = FileKind.DIRECTORY
            else:
                kind = FileKind.FILE
            name = name.removesuffix(separator)
            if separator in name:
                name = name.split(separator, 1)[0]
                kind = FileKind.DIRECTORY
            if not name:
                continue
            if entries.get(name) is not FileKind.DIRECTORY:
                entries[name] = kind
        return entries

    def _fail(self, error: Exception, path: str, syscall: str) -> FileSystemError:
        """Converts a failure and logs it once, at the boundary where it is converted."""
        fs_error = convert_error(error, path, syscall)
        if fs_error is error:
            return fs_error
        if is_not_found_error(fs_error):
            logger.debug("Path not found", extra={"path": path, "syscall": syscall})
        else:
            logger.error(
                "Object storage operation failed",
                exc_info=error,
                extra={"path": path, "syscall": syscall, "code": fs_error.code},
            )
        return fs_error
