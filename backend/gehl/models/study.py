# backend/gehl/models/study.py
from sqlalchemy import Column, ForeignKey, String, Enum
from sqlalchemy.dialects.postgresql import UUID, JSONB
from .base import Base, SCHEMA

StudyType = Enum("activity", "movement", name="study_type", schema=SCHEMA)

class Study(Base):
    __tablename__ = "study"
    __table_args__ = {"schema": SCHEMA}
    study_id = Column(UUID(as_uuid=True), primary_key=True)
    title = Column(String, nullable=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("public.users.user_id"), nullable=False)
    protocol_version = Column(String, nullable=False)
    study_type = Column(StudyType, nullable=False)
    # selected Gehl field names, e.g. ["gender", "location"]
    table_definition = Column(JSONB, nullable=False)
    tablename = Column(String, nullable=False, unique=True)
    map = Column(JSONB, nullable=True)  # GeoJSON FeatureCollection
