# backend/gehl/schemas/survey.py
from pydantic import BaseModel
from typing import Optional
from uuid import UUID
import datetime as dt


class SurveyIn(BaseModel):
    study_id: UUID
    user_email: str
    survey_id: Optional[UUID] = None
    location_id: Optional[UUID] = None
    title: Optional[str] = None
    start_date: Optional[dt.datetime] = None
    end_date: Optional[dt.datetime] = None
    time_character: Optional[str] = None
    representation: Optional[str] = None
    microclimate: Optional[str] = None
    temperature_c: Optional[float] = None
    method: Optional[str] = None
    notes: str = ""


class SurveyUpdate(BaseModel):
    title: Optional[str] = None
    location_id: Optional[UUID] = None
    start_date: Optional[dt.datetime] = None
    end_date: Optional[dt.datetime] = None
    time_character: Optional[str] = None
    representation: Optional[str] = None
    microclimate: Optional[str] = None
    temperature_c: Optional[float] = None
    method: Optional[str] = None
    user_email: Optional[str] = None
    notes: Optional[str] = None

    def changes(self) -> dict:
        """Supplied fields keyed by survey column name."""
        data = self.model_dump(exclude_unset=True)
        renames = {"start_date": "time_start", "end_date": "time_stop"}
        return {renames.get(k, k): v for k, v in data.items()}
