"""Configuration for the object storage client, loaded from environment variables."""

import os

from pydantic import BaseModel, Field

MIN_PART_SIZE = 5 * 1024 * 1024
DEFAULT_PART_SIZE = 10 * 1024 * 1024


class MinioConfig(BaseModel, frozen=True):
    """MinIO connection and addressing configuration.

    Leaving ``bucket_name`` unset selects bucket-in-path addressing, where the
    first path segment names the bucket.
    """

    endpoint: str = Field(min_length=1)
    user: str = Field(min_length=1)
    password: str = Field(min_length=1)
    bucket_name: str | None = None
    prefix: str = ""
    secure: bool = False
    region: str = "us-east-1"
    part_size: int = Field(default=DEFAULT_PART_SIZE, ge=MIN_PART_SIZE)


def load_config() -> MinioConfig:
    """Loads configuration from environment variables."""
    return MinioConfig(
        endpoint=os.getenv("MINIO_ENDPOINT", "localhost:9000"),
        user=os.getenv("MINIO_USER", ""),
        password=os.getenv("MINIO_PASSWORD", ""),
        bucket_name=os.getenv("MINIO_BUCKET") or None,
        prefix=os.getenv("MINIO_PREFIX", ""),
        secure=os.getenv("MINIO_SECURE", "false"),
        region=os.getenv("MINIO_REGION", "us-east-1"),
        part_size=os.getenv("MINIO_PART_SIZE", str(DEFAULT_PART_SIZE)),
    )
