from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from uuid import UUID

from gehl.db import get_db
from gehl.schemas.survey import SurveyIn, SurveyUpdate
from gehl.services.persistence import surveys

router = APIRouter()


@router.get("/ping")
def ping():
    return {"ok": True, "router": "surveys"}


@router.post("")
@router.post("/")
def create_survey(payload: SurveyIn, db: Session = Depends(get_db)):
    survey_id = surveys.create_survey(db, **payload.model_dump())
    return {"survey_id": survey_id}


@router.patch("/{survey_id}")
def update_survey(survey_id: UUID, payload: SurveyUpdate, db: Session = Depends(get_db)):
    surveys.update_survey(db, survey_id, payload.changes())
    return {"ok": True}


@router.get("/{survey_id}/surveyor/{user_id}")
def is_surveyor(survey_id: UUID, user_id: UUID, db: Session = Depends(get_db)):
    return {"surveyor": surveys.check_user_is_surveyor(db, user_id, survey_id)}
