"""
Match model: one finalized dinner table
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship

from app.core.db import Base
from app.models._ids import new_uuid

class Match(Base):
    __tablename__ = "matches"
    
    id = Column(String(36), primary_key=True, default=new_uuid)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False)
    restaurant_name = Column(String(255), nullable=False)
    restaurant_url = Column(String(1024), nullable=True)
    reservation_name = Column(String(255), nullable=True)
    table_members = Column(JSON, nullable=False, default=list)  # user ids and guest:<id>
    created_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    event = relationship("Event", back_populates="matches")
