# backend/gehl/services/provision/tables.py
"""
Per-study data tables.

Every study stores its data points in its own table, named after the study id
and shaped by one of the TableSchema templates. Nothing from the caller is
formatted into the DDL except a table name that has been re-derived from a
UUID and matched against TABLENAME_PATTERN.
"""
from __future__ import annotations

import re
import uuid
from typing import Iterable, Union

from gehl.errors import ValidationError
from gehl.services.registry.fields import TableSchema, schema_for_fields

NAMESPACE = "data_collection"
TABLE_PREFIX = f"{NAMESPACE}.study_"
TABLENAME_PATTERN = re.compile(r"^data_collection\.study_[0-9a-f]{32}$")

_COMMON_COLUMNS = """
    survey_id UUID REFERENCES data_collection.survey(survey_id) ON DELETE CASCADE NOT NULL,
    data_point_id UUID PRIMARY KEY NOT NULL,"""

_TEMPLATES = {
    TableSchema.GENDER_LOCATION: _COMMON_COLUMNS + """
    gender data_collection.gender,
    creation_date timestamptz,
    last_updated timestamptz,
    location geometry NOT NULL
""",
    TableSchema.FULL: _COMMON_COLUMNS + """
    gender data_collection.gender,
    age varchar(64),
    mode data_collection.mode,
    posture data_collection.posture,
    activities data_collection.activities[],
    groups data_collection.groups,
    object data_collection.object,
    location geometry NOT NULL,
    creation_date timestamptz,
    last_updated timestamptz,
    note text
""",
}


def derive_table_name(study_id: Union[str, uuid.UUID]) -> str:
    """data_collection.study_ followed by the study id without hyphens."""
    try:
        study_uuid = study_id if isinstance(study_id, uuid.UUID) else uuid.UUID(str(study_id))
    except ValueError:
        raise ValidationError(f"study id is not a UUID: {study_id!r}") from None
    return TABLE_PREFIX + study_uuid.hex


def checked_table_name(tablename: str) -> str:
    """Reject anything that could not have come out of derive_table_name."""
    if not isinstance(tablename, str) or not TABLENAME_PATTERN.match(tablename):
        raise ValidationError(f"not a study table name: {tablename!r}")
    return tablename


def create_table_statement(tablename: str, fields: Union[TableSchema, Iterable[str]]) -> str:
    schema = fields if isinstance(fields, TableSchema) else schema_for_fields(fields)
    return f"CREATE TABLE {checked_table_name(tablename)} ({_TEMPLATES[schema]})"


def drop_table_statement(tablename: str) -> str:
    return f"DROP TABLE IF EXISTS {checked_table_name(tablename)}"
