# backend/gehl/schemas/location.py
from pydantic import BaseModel
from typing import Optional
from uuid import UUID


class LocationIn(BaseModel):
    location_id: Optional[UUID] = None
    name_primary: str
    country: str = ""
    city: str = ""
    subdivision: str = ""
    geometry: dict  # GeoJSON geometry or FeatureCollection


class LocationOut(BaseModel):
    location_id: UUID
    name_primary: str
    country: Optional[str] = ""
    city: Optional[str] = ""
    subdivision: Optional[str] = ""
    geometry: dict
