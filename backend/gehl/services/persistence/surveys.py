# backend/gehl/services/persistence/surveys.py
import logging
import uuid
from typing import Any, Mapping

from sqlalchemy.orm import Session

from gehl.errors import NotFoundError, ValidationError
from gehl.services.persistence.base import commit, execute

logger = logging.getLogger(__name__)

SURVEY_UPDATABLE_COLUMNS = (
    "title",
    "location_id",
    "time_start",
    "time_stop",
    "time_character",
    "representation",
    "microclimate",
    "temperature_c",
    "method",
    "notes",
)


def _user_id_for_email(db: Session, email: str):
    row = execute(
        db,
        "SELECT user_id FROM public.users WHERE email = :email",
        {"email": email},
    ).first()
    if row is None:
        raise NotFoundError(f"User not found for email: {email}")
    return row[0]


def create_survey(
    db: Session,
    study_id,
    user_email: str,
    survey_id=None,
    location_id=None,
    title=None,
    start_date=None,
    end_date=None,
    time_character=None,
    representation=None,
    microclimate=None,
    temperature_c=None,
    method=None,
    notes="",
) -> uuid.UUID:
    """Insert a survey conducted by the user with user_email."""
    user_id = _user_id_for_email(db, user_email)
    params = {
        "survey_id": survey_id or uuid.uuid4(),
        "study_id": study_id,
        "location_id": location_id,
        "user_id": user_id,
        "title": title,
        "time_start": start_date,
        "time_stop": end_date,
        "time_character": time_character,
        "representation": representation,
        "microclimate": microclimate,
        "temperature_c": temperature_c,
        "method": method,
        "notes": notes or "",
    }
    columns = ", ".join(params)
    bindings = ", ".join(f":{k}" for k in params)
    execute(db, f"INSERT INTO data_collection.survey ({columns}) VALUES ({bindings})", params)
    commit(db)
    logger.info("created survey %s for study %s", params["survey_id"], study_id)
    return params["survey_id"]


def update_survey(db: Session, survey_id, changes: Mapping[str, Any]) -> int:
    """Set the given columns of one survey. user_email re-assigns the surveyor."""
    changes = dict(changes)
    params: dict = {}
    if "user_email" in changes:
        params["user_id"] = _user_id_for_email(db, changes.pop("user_email"))
    unknown = set(changes) - set(SURVEY_UPDATABLE_COLUMNS)
    if unknown:
        raise ValidationError(f"cannot update survey columns: {sorted(unknown)}")
    params.update(changes)
    if not params:
        raise ValidationError("nothing to update")

    assignments = ", ".join(f"{k} = :{k}" for k in params)
    params["survey_id"] = survey_id
    res = execute(
        db,
        f"UPDATE data_collection.survey SET {assignments} WHERE survey_id = :survey_id",
        params,
    )
    if res.rowcount != 1:
        db.rollback()
        raise NotFoundError(f"no survey found for surveyId: {survey_id}")
    commit(db)
    return res.rowcount


def check_user_is_surveyor(db: Session, user_id, survey_id) -> bool:
    row = execute(
        db,
        """
        SELECT user_id, survey_id
        FROM data_collection.survey
        WHERE user_id = :user_id AND survey_id = :survey_id
        """,
        {"user_id": user_id, "survey_id": survey_id},
    ).first()
    return row is not None
