"""
Database models package
"""

from .user import User
from .event import Event
from .participation import Participation
from .guest import Guest
from .match import Match
from .review import Review

__all__ = ["User", "Event", "Participation", "Guest", "Match", "Review"]
