# database/models.py
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, JSON, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class StateDocument(Base):
    """One persisted document (sessionState, forestState, ...) per row."""
    __tablename__ = 'state_documents'

    key = Column(String(64), primary_key=True)
    payload = Column(JSON)
    # Bumped on every write; compare-and-swap updates match on it
    version = Column(Integer, nullable=False, default=1)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
