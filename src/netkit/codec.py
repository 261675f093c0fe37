"""JSON encoding and decoding with configurable key-case and date strategies."""

from __future__ import annotations

import json
import re
from datetime import datetime
from functools import lru_cache
from typing import Any, Callable

from pydantic import TypeAdapter
from pydantic_core import to_jsonable_python

from .models.config import DateFormat, KeyCase

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def to_camel_case(name: str) -> str:
    """Convert snake_case to camelCase, keeping leading underscores."""
    stripped = name.lstrip("_")
    prefix = name[: len(name) - len(stripped)]
    head, *rest = stripped.split("_")
    return prefix + head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_snake_case(name: str) -> str:
    """Convert camelCase (or PascalCase) to snake_case."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def _convert_keys(value: Any, convert: Callable[[str], str]) -> Any:
    if isinstance(value, dict):
        return {
            (convert(key) if isinstance(key, str) else key): _convert_keys(item, convert)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [_convert_keys(item, convert) for item in value]
    return value


@lru_cache(maxsize=256)
def _adapter(type_: Any) -> TypeAdapter:
    return TypeAdapter(type_)


class JSONEncoder:
    """
    Encodes request bodies and queries to JSON bytes.

    Accepts anything pydantic can serialize: models, dataclasses,
    TypedDicts, plain dicts and lists. None-valued fields are omitted.

    Example:
        encoder = JSONEncoder(key_case=KeyCase.CAMEL)
        encoder.encode(CreateUser(first_name="John"))  # b'{"firstName":"John"}'
    """

    def __init__(
        self,
        date_format: DateFormat = DateFormat.ISO8601,
        key_case: KeyCase = KeyCase.SNAKE,
    ) -> None:
        self.date_format = date_format
        self.key_case = key_case

    def _format_datetime(self, value: datetime) -> Any:
        if self.date_format != DateFormat.ISO8601 and value.tzinfo is None:
            # A naive value has no fixed instant, so it has no epoch timestamp
            raise ValueError(f"Cannot encode naive datetime {value.isoformat()} as an epoch timestamp")
        if self.date_format == DateFormat.EPOCH_SECONDS:
            return value.timestamp()
        if self.date_format == DateFormat.EPOCH_MILLISECONDS:
            return int(round(value.timestamp() * 1000))
        return value.isoformat().replace("+00:00", "Z")

    def _prepare(self, value: Any) -> Any:
        if isinstance(value, datetime):
            return self._format_datetime(value)
        if isinstance(value, dict):
            return {
                (self._wire_key(key) if isinstance(key, str) else key): self._prepare(item)
                for key, item in value.items()
            }
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self._prepare(item) for item in value]
        return value

    def _wire_key(self, key: str) -> str:
        if self.key_case == KeyCase.CAMEL:
            return to_camel_case(key)
        return key

    def to_jsonable(self, value: Any) -> Any:
        """Convert `value` to plain JSON-compatible Python data."""
        data = _adapter(type(value)).dump_python(value, by_alias=True, exclude_none=True)
        return self._prepare(data)

    def encode(self, value: Any) -> bytes:
        """
        Encode `value` to UTF-8 JSON bytes.

        Raises:
            pydantic errors, TypeError or ValueError if the value cannot
            be serialized
        """
        return json.dumps(
            self.to_jsonable(value),
            default=to_jsonable_python,
            ensure_ascii=False,
            separators=(",", ":"),
        ).encode("utf-8")


class JSONDecoder:
    """
    Decodes response bodies into a declared Python type.

    Validation is done by pydantic, so datetimes are accepted as ISO 8601
    strings or as epoch seconds/milliseconds regardless of `date_format`.
    """

    def __init__(
        self,
        date_format: DateFormat = DateFormat.ISO8601,
        key_case: KeyCase = KeyCase.SNAKE,
    ) -> None:
        self.date_format = date_format
        self.key_case = key_case

    def decode(self, data: bytes, response_type: Any = Any) -> Any:
        """
        Decode `data` into an instance of `response_type`.

        `bytes` returns the payload untouched and `None` skips decoding.

        Raises:
            json.JSONDecodeError or pydantic.ValidationError on malformed payloads
        """
        if response_type is bytes:
            return data
        if response_type is None or response_type is type(None):
            return None

        payload = json.loads(data)
        if self.key_case == KeyCase.CAMEL:
            payload = _convert_keys(payload, to_snake_case)
        return _adapter(response_type).validate_python(payload)


def _query_value(value: Any) -> str:
    # JSON spelling for booleans, not 1/0
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def encode_query_items(query: Any, encoder: JSONEncoder) -> list[tuple[str, str]]:
    """
    Flatten a query object into ordered (name, value) pairs.

    The query is encoded with `encoder` first, so key-case and date
    strategies apply. List values expand to one pair per element under
    the same name; None values are dropped. Non-object queries yield
    no pairs.

    Example:
        >>> encode_query_items({"name": "John", "tags": ["a", "b"]}, JSONEncoder())
        [('name', 'John'), ('tags', 'a'), ('tags', 'b')]
    """
    data = json.loads(encoder.encode(query))
    if not isinstance(data, dict):
        return []

    items: list[tuple[str, str]] = []
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, list):
            items.extend((key, _query_value(element)) for element in value if element is not None)
        else:
            items.append((key, _query_value(value)))
    return items
