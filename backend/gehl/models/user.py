# backend/gehl/models/user.py
from sqlalchemy import Column, String
from sqlalchemy.dialects.postgresql import UUID
from .base import Base

class User(Base):
    __tablename__ = "users"
    __table_args__ = {"schema": "public"}
    user_id = Column(UUID(as_uuid=True), primary_key=True)
    email = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=True)
    password = Column(String, nullable=True)  # bcrypt hash; empty for OAuth / invited users
