"""
Table-assignment engine package
"""

from .models import (
    BlockRelation,
    EventRoster,
    Group,
    Guest,
    GuestRef,
    MemberRef,
    Participant,
    Table,
    UserProfile,
    UserRef,
)
from .constraints import BlockIndex
from .groups import extract_groups
from .scoring import TableScore, score_table
from .assignment import auto_assign, compute_table_count
from .editor import MatchingSession, TableIssue

__all__ = [
    "BlockRelation",
    "EventRoster",
    "Group",
    "Guest",
    "GuestRef",
    "MemberRef",
    "Participant",
    "Table",
    "UserProfile",
    "UserRef",
    "BlockIndex",
    "extract_groups",
    "TableScore",
    "score_table",
    "auto_assign",
    "compute_table_count",
    "MatchingSession",
    "TableIssue",
]
