from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session
from typing import Any
from uuid import UUID

from gehl.db import get_db
from gehl.services.persistence import datapoints

router = APIRouter()


@router.get("/{survey_id}/datapoints")
def list_data_points(survey_id: UUID, db: Session = Depends(get_db)):
    return datapoints.list_data_points(db, survey_id)


@router.post("/{survey_id}/datapoints")
def save_data_point(survey_id: UUID, payload: dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    # 同じ data_point_id の再送は上書き
    datapoints.insert_or_update_data_point(db, survey_id, payload)
    return {"ok": True, "data_point_id": payload.get("data_point_id")}


@router.delete("/{survey_id}/datapoints/{data_point_id}")
def delete_data_point(survey_id: UUID, data_point_id: UUID, db: Session = Depends(get_db)):
    datapoints.delete_data_point(db, survey_id, data_point_id)
    return {"ok": True}
