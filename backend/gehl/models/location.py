# backend/gehl/models/location.py
from sqlalchemy import Column, String
from sqlalchemy.dialects.postgresql import UUID
from geoalchemy2 import Geometry
from .base import Base, SCHEMA

class Location(Base):
    __tablename__ = "location"
    __table_args__ = {"schema": SCHEMA}
    location_id = Column(UUID(as_uuid=True), primary_key=True)
    country = Column(String, default="")
    city = Column(String, default="")
    name_primary = Column(String, nullable=False)
    subdivision = Column(String, default="")
    geometry = Column(Geometry(srid=4326, spatial_index=False), nullable=False)  # Point | Polygon | GeometryCollection
