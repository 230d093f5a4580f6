"""
Guest model: a non-member attendee added by an operator
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from app.core.db import Base
from app.models._ids import new_uuid

class Guest(Base):
    __tablename__ = "guests"
    
    id = Column(String(36), primary_key=True, default=new_uuid)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False)
    group_id = Column(String(36), nullable=False, default=new_uuid)
    display_name = Column(String(255), nullable=False)
    gender = Column(String(10), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    event = relationship("Event", back_populates="guests")
