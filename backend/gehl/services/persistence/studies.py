# backend/gehl/services/persistence/studies.py
"""
Study metadata and the per-study data tables behind it.

A study row and its data table are created and destroyed together in a single
transaction; PostgreSQL DDL is transactional so a failing CREATE TABLE rolls
the metadata insert back with it.
"""
import logging
import uuid
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gehl.errors import NotFoundError, ValidationError
from gehl.models.study import Study
from gehl.services.persistence.base import commit, execute, is_foreign_key_violation
from gehl.services.persistence.users import create_user_from_email
from gehl.services.provision.tables import (
    create_table_statement,
    derive_table_name,
    drop_table_statement,
)
from gehl.services.registry.fields import schema_for_fields

logger = logging.getLogger(__name__)

STUDY_TYPES = ("activity", "movement")

# surveyor insert; an unknown email resolves to the nil uuid so the foreign key fails
_GRANT_ACCESS = """
INSERT INTO data_collection.surveyors (user_id, study_id)
SELECT coalesce(
           (SELECT pu.user_id FROM public.users pu WHERE pu.email = :email),
           '00000000-0000-0000-0000-000000000000'
       ),
       :study_id
"""


def _as_uuid(value, what: str) -> uuid.UUID:
    try:
        return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
    except ValueError:
        raise ValidationError(f"{what} is not a UUID: {value!r}") from None


def create_study(
    db: Session,
    study_id,
    user_id,
    fields: Iterable[str],
    protocol_version: str,
    study_type: str = "activity",
    title: Optional[str] = None,
    map: Optional[dict] = None,
) -> Study:
    # validate everything before touching the database
    schema = schema_for_fields(fields)
    if study_type not in STUDY_TYPES:
        raise ValidationError(f"study type must be one of {STUDY_TYPES}: {study_type!r}")
    study_uuid = _as_uuid(study_id, "study id")
    tablename = derive_table_name(study_uuid)
    ddl = create_table_statement(tablename, schema)

    study = Study(
        study_id=study_uuid,
        title=title,
        user_id=_as_uuid(user_id, "user id"),
        protocol_version=protocol_version,
        study_type=study_type,
        table_definition=list(schema.fields),
        tablename=tablename,
        map=map or {},
    )
    try:
        db.add(study)
        db.flush()
        execute(db, ddl)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("for studyId: %s, study not created: %s", study_uuid, e)
        raise
    logger.info("created study %s with table %s (%s)", study_uuid, tablename, schema.value)
    return study


def delete_study(db: Session, study_id) -> None:
    study_uuid = _as_uuid(study_id, "study id")
    study = db.get(Study, study_uuid)
    if study is None:
        raise NotFoundError(f"no study found for studyId: {study_id}")
    try:
        # table first: it references the surveys removed by the cascade
        execute(db, drop_table_statement(derive_table_name(study_uuid)))
        db.delete(study)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info("deleted study %s", study_uuid)


def studies_for_admin(db: Session, user_id) -> list[dict]:
    """Studies owned by a user, with the emails of their surveyors."""
    res = execute(
        db,
        """
        WITH study_and_surveyors (study_id, emails) AS (
            SELECT s.study_id, array_agg(u.email)
            FROM data_collection.surveyors AS s
            JOIN public.users AS u ON u.user_id = s.user_id
            GROUP BY study_id
        )
        SELECT stu.study_id, stu.title, stu.protocol_version, stu.map,
               stu.study_type, stu.table_definition, sas.emails
        FROM data_collection.study AS stu
        LEFT JOIN study_and_surveyors AS sas ON stu.study_id = sas.study_id
        WHERE stu.user_id = :user_id
        """,
        {"user_id": user_id},
    )
    return [
        {
            "study_id": r["study_id"],
            "title": r["title"],
            "protocol_version": r["protocol_version"],
            "map": r["map"],
            "type": r["study_type"],
            "fields": r["table_definition"],
            "surveyors": list(r["emails"] or []),
        }
        for r in res.mappings().all()
    ]


def studies_user_is_assigned_to(db: Session, user_id) -> list[dict]:
    """Studies a surveyor has surveys in, each with its surveys."""
    res = execute(
        db,
        """
        SELECT stu.study_id, stu.title AS study_title, stu.protocol_version,
               stu.study_type, stu.map, svy.survey_id, svy.title AS survey_title,
               svy.time_start, svy.time_stop, svy.location_id,
               CAST(ST_AsGeoJSON(loc.geometry) AS json) AS survey_location
        FROM data_collection.survey AS svy
        JOIN data_collection.study AS stu ON svy.study_id = stu.study_id
        LEFT JOIN data_collection.location AS loc ON svy.location_id = loc.location_id
        WHERE svy.user_id = :user_id
        """,
        {"user_id": user_id},
    )
    studies: dict = {}
    for r in res.mappings().all():
        survey = {
            "survey_id": r["survey_id"],
            "title": r["survey_title"],
            "start_date": r["time_start"],
            "end_date": r["time_stop"],
            "location_id": r["location_id"],
            "survey_location": r["survey_location"],
        }
        entry = studies.setdefault(r["study_id"], {
            "study_id": r["study_id"],
            "title": r["study_title"],
            "protocol_version": r["protocol_version"],
            "type": r["study_type"],
            "map": r["map"],
            "surveys": [],
        })
        entry["surveys"].append(survey)
    return list(studies.values())


def surveys_for_study(db: Session, study_id) -> list[dict]:
    res = execute(
        db,
        """
        SELECT s.survey_id, s.title, s.time_start, s.time_stop, s.representation,
               s.microclimate, s.temperature_c, s.method, s.user_id, s.location_id,
               s.notes, u.email
        FROM data_collection.survey AS s
        JOIN public.users AS u ON s.user_id = u.user_id
        WHERE s.study_id = :study_id
        ORDER BY s.time_start
        """,
        {"study_id": study_id},
    )
    return [dict(r) for r in res.mappings().all()]


def give_user_study_access(db: Session, email: str, study_id):
    """Add a surveyor to a study.

    Returns (rows inserted, id of the user created for the email or None). When
    nobody has signed up with the email yet, a user is created and the insert
    retried once. The failed insert is rolled back first, so the user and the
    retried insert are committed together in a new transaction.
    """
    params = {"email": email, "study_id": _as_uuid(study_id, "study id")}
    try:
        res = execute(db, _GRANT_ACCESS, params)
        commit(db)
        return res.rowcount, None
    except SQLAlchemyError as e:
        db.rollback()
        if not is_foreign_key_violation(e):
            raise
    logger.info("no user for %s, creating one before granting access to %s", email, study_id)
    try:
        new_user_id = create_user_from_email(db, email, autocommit=False)
        res = execute(db, _GRANT_ACCESS, params)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    return res.rowcount, new_user_id
