"""Tests for fragments.serde validation helpers."""

from types import MappingProxyType

import pytest

from fragments.errors import ValidationError
from fragments.serde import (
    as_str_object_dict,
    parse_int_text,
    require_int,
    require_non_negative_int,
    require_string,
)


def test_as_str_object_dict_accepts_mappings() -> None:
    assert as_str_object_dict(MappingProxyType({"a": 1}), field_name="record") == {"a": 1}


def test_as_str_object_dict_rejects_non_mapping() -> None:
    with pytest.raises(ValidationError, match="record must be a mapping"):
        as_str_object_dict(["a"], field_name="record")


@pytest.mark.parametrize("value", [None, "", 3, b"abc"])
def test_require_string_rejects(value: object) -> None:
    with pytest.raises(ValidationError, match="field"):
        require_string(value, field_name="field")


def test_require_string_returns_value() -> None:
    assert require_string("abc", field_name="field") == "abc"


@pytest.mark.parametrize(
    "value",
    [
        pytest.param(True, id="bool"),
        pytest.param(1.0, id="float"),
        pytest.param("1", id="str"),
        pytest.param(None, id="none"),
    ],
)
def test_require_int_rejects_non_integers(value: object) -> None:
    with pytest.raises(ValidationError):
        require_int(value, field_name="size")


def test_require_non_negative_int() -> None:
    assert require_non_negative_int(0, field_name="size") == 0
    assert require_non_negative_int(12, field_name="size") == 12
    with pytest.raises(ValidationError, match=">= 0"):
        require_non_negative_int(-1, field_name="size")


def test_parse_int_text() -> None:
    assert parse_int_text(" 42 ", field_name="LIMIT") == 42
    with pytest.raises(ValidationError, match="LIMIT must be an integer"):
        parse_int_text("lots", field_name="LIMIT")
