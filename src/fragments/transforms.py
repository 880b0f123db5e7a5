"""Pure text transforms used by the conversion table.

Every transform takes decoded UTF-8 text and returns text. Malformed input
raises ``ValueError``; the conversion engine turns that into
``ConversionFailedError``.
"""

import csv
import io
import json

import yaml
from markdown_it import MarkdownIt

_MARKDOWN = MarkdownIt("commonmark")


def as_plain_text(text: str) -> str:
    """Return text unchanged (the universal text/plain fallback)."""
    return text


def markdown_to_html(text: str) -> str:
    """Render CommonMark markdown to an HTML fragment."""
    return _MARKDOWN.render(text)


def csv_to_json(text: str) -> str:
    """Convert CSV into a JSON array of records keyed by the header row.

    Short rows are filled with empty strings; cells beyond the header are
    dropped. Blank lines are skipped and header-only input yields ``[]``.
    Duplicate header names are rejected.
    """
    try:
        rows = [row for row in csv.reader(io.StringIO(text)) if any(cell.strip() for cell in row)]
    except csv.Error as exc:
        msg = f"malformed CSV: {exc}"
        raise ValueError(msg) from exc

    if not rows:
        return "[]"

    headers = [cell.strip() for cell in rows[0]]
    duplicates = sorted({header for header in headers if headers.count(header) > 1})
    if duplicates:
        msg = f"duplicate CSV header names: {', '.join(repr(name) for name in duplicates)}"
        raise ValueError(msg)
    records = [
        {header: row[index].strip() if index < len(row) else "" for index, header in enumerate(headers)}
        for row in rows[1:]
    ]
    return json.dumps(records, ensure_ascii=False)


def json_to_yaml(text: str) -> str:
    """Re-serialize a JSON document as YAML, preserving key order."""
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f"malformed JSON: {exc}"
        raise ValueError(msg) from exc
    return yaml.safe_dump(document, sort_keys=False, allow_unicode=True)


def _json_key(key: object) -> str | int | float | bool | None:
    if key is None or isinstance(key, (str, int, float, bool)):
        return key
    return str(key)


def _json_ready(value: object) -> object:
    """Rebuild a loaded YAML document so every mapping key is JSON-encodable."""
    if isinstance(value, dict):
        return {_json_key(key): _json_ready(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_ready(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return sorted((_json_ready(item) for item in value), key=str)
    return value


def yaml_to_json(text: str) -> str:
    """Re-serialize a YAML document as JSON.

    Scalars JSON cannot represent natively (dates, timestamps) are written as
    strings, in values and mapping keys alike. ``.nan`` and ``.inf`` are
    rejected.
    """
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        msg = f"malformed YAML: {exc}"
        raise ValueError(msg) from exc
    try:
        return json.dumps(_json_ready(document), ensure_ascii=False, allow_nan=False, default=str)
    except (TypeError, ValueError) as exc:
        msg = f"YAML document cannot be represented as JSON: {exc}"
        raise ValueError(msg) from exc
