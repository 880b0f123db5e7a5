"""Tests for Content-Type parsing and extension helpers."""

import pytest

from fragments.errors import ValidationError
from fragments.media import ContentType, normalize_extension, parse_content_type, split_extension


def test_parse_bare_type() -> None:
    parsed = parse_content_type("text/plain")
    assert parsed.mime_type == "text/plain"
    assert dict(parsed.parameters) == {}
    assert parsed.major == "text"


def test_parse_lowercases_type_and_parameter_names() -> None:
    parsed = parse_content_type("Text/HTML; Charset=UTF-8")
    assert parsed.mime_type == "text/html"
    assert dict(parsed.parameters) == {"charset": "UTF-8"}


def test_parse_strips_quotes_and_whitespace() -> None:
    parsed = parse_content_type('  application/json ;  charset="utf-8" ; ')
    assert parsed.mime_type == "application/json"
    assert dict(parsed.parameters) == {"charset": "utf-8"}


@pytest.mark.parametrize(
    "value",
    [
        pytest.param("text", id="no-slash"),
        pytest.param("/plain", id="no-major"),
        pytest.param("text/", id="no-minor"),
        pytest.param("text/pl ain", id="space"),
        pytest.param("text/plain; charset", id="param-without-value"),
        pytest.param("", id="empty"),
    ],
)
def test_parse_rejects_malformed_values(value: str) -> None:
    with pytest.raises(ValidationError):
        parse_content_type(value)


def test_parse_rejects_non_string() -> None:
    with pytest.raises(ValidationError, match="must be a string"):
        parse_content_type(None)  # type: ignore[arg-type]


def test_content_type_parameters_are_read_only() -> None:
    parsed = ContentType("text/plain", {"charset": "utf-8"})
    with pytest.raises(TypeError):
        parsed.parameters["charset"] = "latin-1"  # type: ignore[index]


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        pytest.param("abc", ("abc", None), id="bare-id"),
        pytest.param("abc.html", ("abc", ".html"), id="with-extension"),
        pytest.param("abc.tar.gz", ("abc.tar", ".gz"), id="last-dot-wins"),
        pytest.param(".hidden", (".hidden", None), id="leading-dot"),
        pytest.param("abc.", ("abc.", None), id="trailing-dot"),
    ],
)
def test_split_extension(name: str, expected: tuple[str, str | None]) -> None:
    assert split_extension(name) == expected


def test_normalize_extension() -> None:
    assert normalize_extension("JPG") == ".jpg"
    assert normalize_extension(".Md") == ".md"
    assert normalize_extension(" ") == ""
