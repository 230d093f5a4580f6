"""
Matching-related Pydantic schemas
"""

from typing import List, Literal, Optional
from pydantic import BaseModel

class TablePayload(BaseModel):
    """One table at the save boundary; guest members carry a guest: prefix"""
    table_id: str
    restaurant_name: str = ""
    restaurant_url: str = ""
    reservation_name: str = ""
    members: List[str] = []

class TableUpdate(BaseModel):
    """Restaurant fields of a working table"""
    restaurant_name: Optional[str] = None
    restaurant_url: Optional[str] = None
    reservation_name: Optional[str] = None

class MemberAssign(BaseModel):
    """Member to seat; the whole group moves with it"""
    member_id: str

class AutoAssignRequest(BaseModel):
    """Auto-assign replaces existing tables only when confirmed"""
    confirm: bool = False

class TableScoreOut(BaseModel):
    total: int
    gender_balance: int
    mood_match: int
    budget_match: int
    personality: int
    verification_match: int
    has_block_conflict: bool

class TableIssueOut(BaseModel):
    message: str
    is_block_error: bool

class TableState(TablePayload):
    """Working table with its score and validation issue"""
    score: TableScoreOut
    issue: Optional[TableIssueOut] = None

class MatchingState(BaseModel):
    """Full working state of an event's matching session"""
    event_id: str
    status: Literal["valid", "invalid", "persisted"]
    is_valid: bool
    tables: List[TableState]
    split_pairs: List[str]
    unassigned: List[str]
