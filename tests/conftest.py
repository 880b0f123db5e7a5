"""Shared fixtures for fragments tests."""

from collections.abc import Iterator

import boto3
import pytest
from moto import mock_aws

from fragments.storage import Storage, set_default_storage

S3_BUCKET = "fragments-test"


@pytest.fixture(autouse=True)
def _reset_default_storage() -> Iterator[None]:
    """Keep the process-wide Storage from leaking between tests."""
    set_default_storage(None)
    yield
    set_default_storage(None)


@pytest.fixture
def storage() -> Storage:
    """Fresh in-memory Storage facade."""
    return Storage()


@pytest.fixture
def s3_client(monkeypatch: pytest.MonkeyPatch) -> Iterator[object]:
    """Mocked S3 client with the test bucket created."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=S3_BUCKET)
        yield client
