import json
import logging

import pytest
from minio import Minio
from pydantic import ValidationError
from pythonjsonlogger import jsonlogger

from fs_object_storage.config import DEFAULT_PART_SIZE, MinioConfig, load_config
from fs_object_storage.logging import setup_logging
from fs_object_storage.minio import get_minio_client


@pytest.fixture
def minio_env(monkeypatch):
    monkeypatch.setenv("MINIO_ENDPOINT", "minio:9000")
    monkeypatch.setenv("MINIO_USER", "minioadmin")
    monkeypatch.setenv("MINIO_PASSWORD", "secret")
    for name in ("MINIO_BUCKET", "MINIO_PREFIX", "MINIO_SECURE", "MINIO_REGION", "MINIO_PART_SIZE"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestLoadConfig:
    def test_defaults(self, minio_env):
        config = load_config()

        assert config.endpoint == "minio:9000"
        assert config.user == "minioadmin"
        assert config.password == "secret"
        assert config.bucket_name is None
        assert config.prefix == ""
        assert config.secure is False
        assert config.region == "us-east-1"
        assert config.part_size == DEFAULT_PART_SIZE

    def test_overrides(self, minio_env):
        minio_env.setenv("MINIO_BUCKET", "data")
        minio_env.setenv("MINIO_PREFIX", "tenant/")
        minio_env.setenv("MINIO_SECURE", "true")
        minio_env.setenv("MINIO_PART_SIZE", str(6 * 1024 * 1024))

        config = load_config()

        assert config.bucket_name == "data"
        assert config.prefix == "tenant/"
        assert config.secure is True
        assert config.part_size == 6 * 1024 * 1024

    def test_empty_bucket_selects_bucket_in_path_mode(self, minio_env):
        minio_env.setenv("MINIO_BUCKET", "")

        assert load_config().bucket_name is None

    def test_missing_credentials(self, minio_env):
        minio_env.delenv("MINIO_USER")

        with pytest.raises(ValidationError):
            load_config()

    def test_part_size_below_minimum(self, minio_env):
        minio_env.setenv("MINIO_PART_SIZE", "1024")

        with pytest.raises(ValidationError):
            load_config()

    def test_config_is_immutable(self):
        config = MinioConfig(endpoint="localhost:9000", user="u", password="p")

        with pytest.raises(ValidationError):
            config.bucket_name = "other"


class TestSetupLogging:
    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root_logger = logging.getLogger()
        level = root_logger.level
        yield
        for handler in root_logger.handlers[:]:
            if isinstance(handler.formatter, jsonlogger.JsonFormatter):
                root_logger.removeHandler(handler)
        root_logger.setLevel(level)

    def test_installs_json_formatter(self):
        root_logger = setup_logging(logging.DEBUG)

        assert root_logger.level == logging.DEBUG
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, jsonlogger.JsonFormatter)
        assert logging.getLogger("urllib3").level == logging.WARNING

    def test_emits_json_with_extra_fields(self, capsys):
        setup_logging()

        logging.getLogger("fs_object_storage.test").info("File written", extra={"path": "/bucket/a.txt"})

        record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert record["message"] == "File written"
        assert record["levelname"] == "INFO"
        assert record["name"] == "fs_object_storage.test"
        assert record["path"] == "/bucket/a.txt"


def test_get_minio_client():
    client = get_minio_client("localhost:9000", "minioadmin", "minioadmin", region="us-east-1")

    assert isinstance(client, Minio)
