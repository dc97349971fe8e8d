from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from uuid import UUID

from gehl.db import get_db
from gehl.schemas.location import LocationIn, LocationOut
from gehl.services.persistence import locations

router = APIRouter()


@router.post("")
@router.post("/")
def create_location(payload: LocationIn, db: Session = Depends(get_db)):
    location_id = locations.create_location(db, **payload.model_dump())
    return {"location_id": location_id}


@router.get("/{location_id}")
def get_location(location_id: UUID, db: Session = Depends(get_db)) -> LocationOut:
    return LocationOut(**locations.get_location(db, location_id))
