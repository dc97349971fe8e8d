# backend/gehl/models/survey.py
from sqlalchemy import Column, ForeignKey, String, Float, DateTime, Text
from sqlalchemy.dialects.postgresql import UUID
from .base import Base, SCHEMA

class Survey(Base):
    __tablename__ = "survey"
    __table_args__ = {"schema": SCHEMA}
    survey_id = Column(UUID(as_uuid=True), primary_key=True)
    study_id = Column(UUID(as_uuid=True), ForeignKey(f"{SCHEMA}.study.study_id", ondelete="CASCADE"), nullable=False)
    location_id = Column(UUID(as_uuid=True), ForeignKey(f"{SCHEMA}.location.location_id"), nullable=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("public.users.user_id"), nullable=False)
    title = Column(String, nullable=True)
    time_start = Column(DateTime(timezone=True), nullable=True)
    time_stop = Column(DateTime(timezone=True), nullable=True)
    time_character = Column(String, nullable=True)
    representation = Column(String, nullable=True)
    microclimate = Column(String, nullable=True)
    temperature_c = Column(Float, nullable=True)
    method = Column(String, nullable=True)
    notes = Column(Text, default="")
