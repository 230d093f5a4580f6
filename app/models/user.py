"""
User model
"""

from datetime import datetime
from sqlalchemy import Column, String, Boolean, Date, DateTime
from sqlalchemy.orm import relationship

from app.core.db import Base
from app.models._ids import new_uuid

class User(Base):
    __tablename__ = "users"
    
    id = Column(String(36), primary_key=True, default=new_uuid)
    display_name = Column(String(255), nullable=False)
    avatar_url = Column(String(1024), nullable=True)
    gender = Column(String(10), nullable=False)  # male, female
    birth_date = Column(Date, nullable=True)
    job = Column(String(255), default="")
    personality_type = Column(String(20), nullable=True)  # Leader, Supporter, Analyst, Entertainer
    subscription_status = Column(String(20), default="none")  # active, canceled, past_due, none
    is_identity_verified = Column(Boolean, default=False)
    line_user_id = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    participations = relationship("Participation", back_populates="user")
