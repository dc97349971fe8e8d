# backend/gehl/services/registry/fields.py
"""
Gehl field vocabulary.

Single source for the observation fields a study can record, how each one is
encoded on its way into PostgreSQL, and the closed set of table shapes a study
may be created with.
"""
from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional

from gehl.errors import UnknownFieldError, UnsupportedFieldSelectionError


class GehlField(str, Enum):
    GENDER = "gender"
    AGE = "age"
    MODE = "mode"
    POSTURE = "posture"
    ACTIVITIES = "activities"
    GROUPS = "groups"
    OBJECT = "object"
    LOCATION = "location"
    NOTE = "note"
    CREATION_DATE = "creation_date"
    LAST_UPDATED = "last_updated"


class Encoding(str, Enum):
    GEOMETRY = "geometry"
    AGE_BAND = "age_band"
    GROUP_BAND = "group_band"
    ARRAY = "array"
    PASSTHROUGH = "passthrough"


ALL_GEHL_FIELDS: tuple[str, ...] = tuple(f.value for f in GehlField)

# keys a data point may carry besides the Gehl fields
IDENTITY_KEYS: tuple[str, ...] = ("survey_id", "data_point_id")
DATA_POINT_KEYS: frozenset[str] = frozenset(ALL_GEHL_FIELDS + IDENTITY_KEYS)

GENDERS = ("male", "female", "unknown")

AGE_BANDS = {
    "child": "0-14",
    "young": "15-24",
    "adult": "25-64",
    "elderly": "65+",
}

GROUP_BANDS = {
    "single": "group_1",
    "pair": "group_2",
    "group": "group_3-7",
    "crowd": "group_8+",
}

ACTIVITIES = (
    "commercial",
    "consuming",
    "conversing",
    "cultural",
    "electronic_engagement",
    "recreation_active",
    "recreation_passive",
    "working_civic",
)

# Enum types created in the data_collection schema. posture/mode/object are
# only checked by the database.
POSTURES = ("standing", "sitting_formal", "sitting_informal", "lying", "multiple")
MODES = ("pedestrian", "bicycle", "motorized", "transit", "other")
OBJECTS = ("animal", "bag_carried", "clothing_cart", "stroller", "luggage", "mobility_aid", "other")

DATABASE_ENUMS: dict[str, tuple[str, ...]] = {
    "gender": GENDERS,
    "mode": MODES,
    "posture": POSTURES,
    "activities": ACTIVITIES,
    "groups": tuple(GROUP_BANDS.values()),
    "object": OBJECTS,
}

_ENCODINGS = {
    GehlField.LOCATION: Encoding.GEOMETRY,
    GehlField.AGE: Encoding.AGE_BAND,
    GehlField.GROUPS: Encoding.GROUP_BAND,
    GehlField.ACTIVITIES: Encoding.ARRAY,
}

# None means the value is not checked here
_DOMAINS: dict[str, Optional[tuple[str, ...]]] = {
    "gender": GENDERS,
    "age": tuple(AGE_BANDS),
    "groups": tuple(GROUP_BANDS),
    "activities": ACTIVITIES,
}


def _field(name: str) -> GehlField:
    try:
        return GehlField(name)
    except ValueError:
        raise UnknownFieldError(name) from None


def encoding_for(name: str) -> Encoding:
    """Encoding rule for a data point key. Identity keys pass through."""
    if name in IDENTITY_KEYS:
        return Encoding.PASSTHROUGH
    return _ENCODINGS.get(_field(name), Encoding.PASSTHROUGH)


def domain_for(name: str) -> Optional[tuple[str, ...]]:
    """Accepted input labels for a field, or None when the field is unchecked."""
    return _DOMAINS.get(_field(name).value)


class TableSchema(str, Enum):
    """Closed set of per-study table shapes."""

    GENDER_LOCATION = "gender_location"
    FULL = "full"

    @property
    def fields(self) -> tuple[str, ...]:
        return _SCHEMA_FIELDS[self]

    @property
    def columns(self) -> tuple[str, ...]:
        """Gehl columns of the table, which may be more than the selection."""
        return _SCHEMA_COLUMNS[self]


_SCHEMA_FIELDS = {
    TableSchema.GENDER_LOCATION: ("gender", "location"),
    TableSchema.FULL: ALL_GEHL_FIELDS,
}

# every study table also keeps the observation timestamps
_SCHEMA_COLUMNS = {
    TableSchema.GENDER_LOCATION: ("gender", "location", "creation_date", "last_updated"),
    TableSchema.FULL: ALL_GEHL_FIELDS,
}


def schema_for_fields(fields: Iterable[str]) -> TableSchema:
    """Return the table shape matching a field selection exactly.

    Order and repetition do not matter. Anything other than one of the
    supported selections raises UnsupportedFieldSelectionError.
    """
    fields = list(fields)
    selected = frozenset(fields)
    for schema in TableSchema:
        if selected == frozenset(schema.fields):
            return schema
    raise UnsupportedFieldSelectionError(fields)


def is_supported_selection(fields: Iterable[str]) -> bool:
    selected = frozenset(fields)
    return any(selected == frozenset(s.fields) for s in TableSchema)
