from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from uuid import UUID

from gehl.db import get_db
from gehl.schemas.study import StudyIn, StudyOut, SurveyorIn
from gehl.services.persistence import studies

router = APIRouter()


@router.get("/ping")
def ping():
    return {"ok": True, "router": "studies"}


@router.post("")
@router.post("/")
def create_study(payload: StudyIn, db: Session = Depends(get_db)) -> StudyOut:
    obj = studies.create_study(
        db,
        study_id=payload.study_id,
        user_id=payload.user_id,
        fields=payload.fields,
        protocol_version=payload.protocol_version,
        study_type=payload.type,
        title=payload.title,
        map=payload.map.model_dump() if payload.map else None,
    )
    return StudyOut(
        study_id=obj.study_id,
        title=obj.title,
        protocol_version=obj.protocol_version,
        type=obj.study_type,
        map=obj.map,
        fields=obj.table_definition,
    )


@router.get("")
@router.get("/")
def list_studies(user_id: UUID, db: Session = Depends(get_db)) -> list[StudyOut]:
    return [StudyOut(**s) for s in studies.studies_for_admin(db, user_id)]


@router.get("/assigned")
def list_assigned_studies(user_id: UUID, db: Session = Depends(get_db)):
    return studies.studies_user_is_assigned_to(db, user_id)


@router.delete("/{study_id}")
def delete_study(study_id: UUID, db: Session = Depends(get_db)):
    studies.delete_study(db, study_id)
    return {"ok": True}


@router.get("/{study_id}/surveys")
def list_surveys(study_id: UUID, db: Session = Depends(get_db)):
    return studies.surveys_for_study(db, study_id)


@router.post("/{study_id}/surveyors")
def add_surveyor(study_id: UUID, payload: SurveyorIn, db: Session = Depends(get_db)):
    inserted, new_user_id = studies.give_user_study_access(db, payload.email, study_id)
    return {"ok": inserted == 1, "created_user_id": new_user_id}
