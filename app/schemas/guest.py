"""
Guest-related Pydantic schemas
"""

from typing import Literal, Optional
from pydantic import BaseModel, Field

class GuestCreate(BaseModel):
    """Schema for adding a guest to an event"""
    display_name: str = Field(..., min_length=1)
    gender: Literal["male", "female"]
    pair_with_guest_id: Optional[str] = None  # join this guest's group

class GuestResponse(BaseModel):
    """Guest response schema"""
    id: str
    event_id: str
    group_id: str
    display_name: str
    gender: str
    
    class Config:
        from_attributes = True
