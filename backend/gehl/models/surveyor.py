# backend/gehl/models/surveyor.py
from sqlalchemy import Column, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from .base import Base, SCHEMA

class Surveyor(Base):
    __tablename__ = "surveyors"
    __table_args__ = {"schema": SCHEMA}
    user_id = Column(UUID(as_uuid=True), ForeignKey("public.users.user_id", ondelete="CASCADE"), primary_key=True)
    study_id = Column(UUID(as_uuid=True), ForeignKey(f"{SCHEMA}.study.study_id", ondelete="CASCADE"), primary_key=True)
