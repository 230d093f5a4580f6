"""
Event model
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship

from app.core.db import Base
from app.models._ids import new_uuid

class Event(Base):
    __tablename__ = "events"
    
    id = Column(String(36), primary_key=True, default=new_uuid)
    event_date = Column(DateTime, nullable=False)
    area = Column(String(50), nullable=False)
    status = Column(String(20), default="open", nullable=False)  # open, matched, closed
    created_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    participations = relationship("Participation", back_populates="event", cascade="all, delete-orphan")
    guests = relationship("Guest", back_populates="event", cascade="all, delete-orphan")
    matches = relationship("Match", back_populates="event", cascade="all, delete-orphan")
