"""
Participation model: a user's sign-up for an event
"""

from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from app.core.db import Base
from app.models._ids import new_uuid

class Participation(Base):
    __tablename__ = "participations"
    
    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False)
    group_id = Column(String(36), nullable=False, index=True)  # shared by pair sign-ups
    status = Column(String(20), default="pending", nullable=False)  # pending, matched, canceled
    mood = Column(String(20), nullable=True)  # lively, relaxed, inspire, other
    mood_text = Column(Text, nullable=True)
    budget_level = Column(Integer, nullable=True)  # 1-3
    created_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    user = relationship("User", back_populates="participations")
    event = relationship("Event", back_populates="participations")
    
    __table_args__ = (UniqueConstraint("user_id", "event_id"),)
