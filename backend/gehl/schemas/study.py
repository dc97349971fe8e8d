# backend/gehl/schemas/study.py
from pydantic import BaseModel, Field
from typing import Any, List, Optional
from uuid import UUID, uuid4
from .commons import FeatureCollection, StudyType


class StudyIn(BaseModel):
    study_id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    title: Optional[str] = None
    protocol_version: str = "1.0"
    type: StudyType = "activity"
    map: Optional[FeatureCollection] = None
    fields: List[str]


class StudyOut(BaseModel):
    study_id: UUID
    title: Optional[str] = None
    protocol_version: str
    type: StudyType
    map: Optional[Any] = None
    fields: List[str] = []
    surveyors: List[str] = []


class SurveyorIn(BaseModel):
    email: str
