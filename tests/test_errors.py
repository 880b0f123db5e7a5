"""Tests for fragments.errors."""

import pytest

from fragments.errors import (
    ConversionFailedError,
    FragmentsError,
    NotFoundError,
    StorageError,
    UnsupportedMediaTypeError,
    ValidationError,
)


def test_fragments_error_is_exception() -> None:
    assert issubclass(FragmentsError, Exception)


@pytest.mark.parametrize(
    "error_type",
    [ValidationError, NotFoundError, UnsupportedMediaTypeError, ConversionFailedError, StorageError],
)
def test_errors_are_fragments_errors(error_type: type[Exception]) -> None:
    assert issubclass(error_type, FragmentsError)


def test_not_found_carries_key() -> None:
    err = NotFoundError("owner-hash", "abc123")
    assert err.owner_id == "owner-hash"
    assert err.fragment_id == "abc123"
    assert str(err) == "Fragment not found: abc123"


def test_not_found_custom_subject() -> None:
    err = NotFoundError("owner-hash", "abc123", what="Fragment data")
    assert str(err) == "Fragment data not found: abc123"


def test_unsupported_media_type_carries_types() -> None:
    err = UnsupportedMediaTypeError("nope", source_type="text/plain", target_type="text/html")
    assert err.source_type == "text/plain"
    assert err.target_type == "text/html"
    assert str(err) == "nope"


def test_unsupported_media_type_defaults() -> None:
    err = UnsupportedMediaTypeError("nope")
    assert err.source_type is None
    assert err.target_type is None


def test_conversion_failed_message() -> None:
    err = ConversionFailedError("application/json", "application/yaml", "malformed JSON")
    assert err.reason == "malformed JSON"
    msg = str(err)
    assert "application/json" in msg
    assert "application/yaml" in msg
    assert "malformed JSON" in msg


def test_storage_error_carries_attributes() -> None:
    err = StorageError("write", "owner/id", "disk full")
    assert err.operation == "write"
    assert err.key == "owner/id"
    assert err.reason == "disk full"
    assert str(err) == "Storage write failed for owner/id: disk full"
