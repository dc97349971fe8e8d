# backend/gehl/models/base.py
from sqlalchemy import MetaData
from sqlalchemy.orm import declarative_base

SCHEMA = "data_collection"

Base = declarative_base(metadata=MetaData())
