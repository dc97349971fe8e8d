# backend/gehl/schemas/commons.py
from pydantic import BaseModel
from typing import Any, List, Literal

StudyType = Literal["activity", "movement"]

class FeatureCollection(BaseModel):
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: List[Any] = []
