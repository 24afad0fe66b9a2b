import pytest

from fakes import FakeMinio
from fs_object_storage import ObjectStorage


@pytest.fixture
def fake_client():
    return FakeMinio()


@pytest.fixture
def storage(fake_client):
    """Client whose paths carry the bucket name as their first segment."""
    return ObjectStorage(fake_client)


@pytest.fixture
def bound_storage(fake_client):
    """Client bound to a single bucket."""
    return ObjectStorage(fake_client, bucket="data")
