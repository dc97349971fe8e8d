# backend/gehl/services/codec/datapoint.py
"""
Turn a raw observation payload into a parameterised upsert.

    encoded = encode(survey_id, {"data_point_id": ..., "gender": "female",
                                 "location": {"longitude": 13.4, "latitude": 52.5}})
    db.execute(text(f"INSERT INTO {tablename} {encoded.statement}"), encoded.params)

Placeholders are named :p1, :p2, ... and handed out by a ParameterAccumulator
that lives for exactly one encode() call. The values list and the placeholder
counter advance together; a lon/lat location is the only field that takes two
slots.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from shapely.geometry import shape

from gehl.errors import (
    DataPointValidationError,
    InvalidFieldValueError,
    UnknownFieldError,
)
from gehl.services.registry.fields import (
    AGE_BANDS,
    DATA_POINT_KEYS,
    GROUP_BANDS,
    IDENTITY_KEYS,
    Encoding,
    domain_for,
    encoding_for,
)

_ARRAY_SPECIAL = set('{},"\\ ')


class ParameterAccumulator:
    """Placeholder names and their values, index-aligned."""

    def __init__(self) -> None:
        self.index = 0
        self.values: list[Any] = []

    def bind(self, value: Any) -> str:
        self.index += 1
        self.values.append(value)
        return f":p{self.index}"

    @property
    def params(self) -> dict[str, Any]:
        return {f"p{i}": v for i, v in enumerate(self.values, start=1)}


@dataclass
class EncodedDataPoint:
    columns: list[str] = field(default_factory=list)
    bindings: list[str] = field(default_factory=list)
    values: list[Any] = field(default_factory=list)
    params: dict[str, Any] = field(default_factory=dict)
    statement: str = ""


def _array_element(x: Any) -> str:
    if x is None:
        raise ValueError("array contains the value null")
    if isinstance(x, (list, tuple)):
        return to_postgres_array(x)
    s = str(x)
    if s == "" or any(c in _ARRAY_SPECIAL for c in s) or s.upper() == "NULL":
        return '"' + s.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return s


def to_postgres_array(xs: Iterable[Any]) -> str:
    """Serialise a (possibly nested) list into a PostgreSQL array literal."""
    xs = list(xs)
    try:
        return "{" + ", ".join(_array_element(x) for x in xs) + "}"
    except ValueError as e:
        raise ValueError(f"Cannot convert {xs!r} into a postgres array: {e}") from None


def _flatten(xs):
    for x in xs:
        if isinstance(x, (list, tuple)):
            yield from _flatten(x)
        else:
            yield x


def _bind_location(acc: ParameterAccumulator, value: Any) -> str:
    if not isinstance(value, Mapping):
        raise InvalidFieldValueError("location", value)
    if value.get("type") == "Point":
        try:
            point = shape(value)
        except Exception:
            raise InvalidFieldValueError("location", value) from None
        if point.is_empty:
            raise InvalidFieldValueError("location", value)
        return f"ST_GeomFromGeoJSON(CAST({acc.bind(json.dumps(dict(value)))} AS text))"
    try:
        longitude = float(value["longitude"])
        latitude = float(value["latitude"])
    except (KeyError, TypeError, ValueError):
        raise InvalidFieldValueError("location", value) from None
    lon = acc.bind(longitude)
    lat = acc.bind(latitude)
    return (
        f"ST_GeomFromText('POINT(' || CAST({lon} AS text) || ' ' || CAST({lat} AS text) || ')', 4326)"
    )


def _remap(key: str, value: Any, table: Mapping[str, str]) -> str:
    try:
        return table[value]
    except (KeyError, TypeError):
        raise InvalidFieldValueError(key, value) from None


def _bind(acc: ParameterAccumulator, key: str, value: Any) -> str:
    rule = encoding_for(key)
    if rule is Encoding.GEOMETRY:
        return _bind_location(acc, value)
    if rule is Encoding.AGE_BAND:
        return acc.bind(_remap(key, value, AGE_BANDS))
    if rule is Encoding.GROUP_BAND:
        return acc.bind(_remap(key, value, GROUP_BANDS))
    if rule is Encoding.ARRAY:
        items = list(value) if isinstance(value, (list, tuple)) else [value]
        vocabulary = domain_for(key)
        for item in _flatten(items):
            if item is None or item not in vocabulary:
                raise InvalidFieldValueError(key, item)
        return acc.bind(to_postgres_array(items))
    if key not in IDENTITY_KEYS:
        vocabulary = domain_for(key)
        if vocabulary is not None and value not in vocabulary:
            raise InvalidFieldValueError(key, value)
    return acc.bind(str(value))


def encode(
    survey_id: Any,
    raw: Mapping[str, Any],
    allowed_fields: Optional[Iterable[str]] = None,
) -> EncodedDataPoint:
    """Build the column list, bindings and upsert clause for one data point.

    Keys whose value is None are dropped. Any other key outside the data point
    vocabulary (or outside allowed_fields, when given) rejects the whole data
    point before a statement exists.
    """
    allowed = DATA_POINT_KEYS
    if allowed_fields is not None:
        allowed = frozenset(allowed_fields) | frozenset(IDENTITY_KEYS)

    data_point_id = raw.get("data_point_id")
    if data_point_id is None:
        raise DataPointValidationError("data_point_id is required")

    kept = {}
    for key, value in raw.items():
        if key not in DATA_POINT_KEYS or key not in allowed:
            raise UnknownFieldError(key)
        if value is None or key in IDENTITY_KEYS:
            continue
        kept[key] = value

    ordered = {"survey_id": survey_id, "data_point_id": data_point_id}
    ordered.update(kept)

    acc = ParameterAccumulator()
    encoded = EncodedDataPoint()
    for key, value in ordered.items():
        encoded.columns.append(key)
        encoded.bindings.append(_bind(acc, key, value))

    encoded.values = acc.values
    encoded.params = acc.params
    cols = ", ".join(encoded.columns)
    updates = ", ".join(f"{c} = EXCLUDED.{c}" for c in encoded.columns if c != "data_point_id")
    encoded.statement = (
        f"({cols}) VALUES ({', '.join(encoded.bindings)})\n"
        f"ON CONFLICT (data_point_id)\n"
        f"DO UPDATE SET {updates}"
    )
    return encoded
