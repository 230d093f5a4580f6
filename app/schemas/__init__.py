"""
Pydantic schemas package
"""

from .common import *
from .guest import *
from .matching import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "GuestCreate",
    "GuestResponse",
    "TablePayload",
    "TableUpdate",
    "MemberAssign",
    "AutoAssignRequest",
    "TableScoreOut",
    "TableIssueOut",
    "TableState",
    "MatchingState",
]
