# backend/gehl/services/persistence/datapoints.py
"""
Data points live in the table of the study their survey belongs to.

The survey -> table mapping is read from the data_collection.survey_to_tablename
view, which is derived from the survey and study rows and so cannot drift from
them.
"""
import logging
from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy.orm import Session

from gehl.errors import NotFoundError
from gehl.models.study import Study
from gehl.services.codec.datapoint import encode
from gehl.services.persistence.base import commit, execute
from gehl.services.provision.tables import checked_table_name, derive_table_name
from gehl.services.registry.fields import schema_for_fields

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StudyTable:
    tablename: str
    columns: tuple[str, ...]


def study_table_for_survey(db: Session, survey_id) -> StudyTable:
    rows = execute(
        db,
        """
        SELECT study_id, tablename, table_definition
        FROM data_collection.survey_to_tablename
        WHERE survey_id = :survey_id
        """,
        {"survey_id": survey_id},
    ).all()
    if len(rows) != 1:
        raise NotFoundError(f"no tablename found for surveyId: {survey_id}")
    study_id, tablename, fields = rows[0]
    if tablename != derive_table_name(study_id):
        raise NotFoundError(f"stale tablename {tablename} for surveyId: {survey_id}")
    return StudyTable(checked_table_name(tablename), schema_for_fields(fields or ()).columns)


def get_table_name_for_survey(db: Session, survey_id) -> str:
    return study_table_for_survey(db, survey_id).tablename


def _upsert(db: Session, table: StudyTable, survey_id, raw: Mapping[str, Any]) -> int:
    encoded = encode(survey_id, raw, allowed_fields=table.columns)
    res = execute(db, f"INSERT INTO {table.tablename}\n{encoded.statement}", encoded.params)
    commit(db)
    return res.rowcount


def insert_or_update_data_point(db: Session, survey_id, raw: Mapping[str, Any]) -> int:
    """Upsert one data point keyed on its data_point_id."""
    table = study_table_for_survey(db, survey_id)
    return _upsert(db, table, survey_id, raw)


def add_data_point_with_study_id(db: Session, study_id, survey_id, raw: Mapping[str, Any]) -> int:
    """Upsert through the table name derived from a known study id."""
    study = db.get(Study, study_id)
    if study is None:
        raise NotFoundError(f"no study found for studyId: {study_id}")
    table = StudyTable(derive_table_name(study_id), schema_for_fields(study.table_definition or ()).columns)
    return _upsert(db, table, survey_id, raw)


def _select_expression(column: str) -> str:
    if column == "location":
        return "CAST(ST_AsGeoJSON(location) AS json) AS location"
    # the driver has no type for the enum array, text[] comes back as a list
    if column == "activities":
        return "CAST(activities AS text[]) AS activities"
    return column


def list_data_points(db: Session, survey_id) -> list[dict]:
    table = study_table_for_survey(db, survey_id)
    select = ", ".join(["data_point_id", "survey_id"] + [_select_expression(c) for c in table.columns])
    res = execute(
        db,
        f"SELECT {select} FROM {table.tablename} WHERE survey_id = :survey_id",
        {"survey_id": survey_id},
    )
    return [dict(r) for r in res.mappings().all()]


def delete_data_point(db: Session, survey_id, data_point_id) -> int:
    table = study_table_for_survey(db, survey_id)
    res = execute(
        db,
        f"DELETE FROM {table.tablename} WHERE data_point_id = :data_point_id AND survey_id = :survey_id",
        {"data_point_id": data_point_id, "survey_id": survey_id},
    )
    if res.rowcount != 1:
        db.rollback()
        raise NotFoundError(f"No data point found to delete for data_point_id: {data_point_id}")
    commit(db)
    return res.rowcount
