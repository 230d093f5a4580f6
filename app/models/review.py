"""
Review model: post-dinner rating of a table mate
"""

from datetime import datetime
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, Text

from app.core.db import Base
from app.models._ids import new_uuid

class Review(Base):
    __tablename__ = "reviews"
    
    id = Column(String(36), primary_key=True, default=new_uuid)
    reviewer_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    target_user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    match_id = Column(String(36), ForeignKey("matches.id", ondelete="SET NULL"), nullable=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    block_flag = Column(Boolean, default=False, nullable=False)  # never seat these two together again
    created_at = Column(DateTime, default=datetime.utcnow)
