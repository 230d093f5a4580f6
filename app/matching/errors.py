"""
Exceptions raised by the matching engine
"""


class MatchingError(RuntimeError):
    """Base class for matching engine errors."""


class TableNotFoundError(MatchingError):
    """Raised when an operation names a table that is not in the session."""

    def __init__(self, table_id: str):
        super().__init__(f"Table '{table_id}' not found")
        self.table_id = table_id


class MemberNotFoundError(MatchingError):
    """Raised when a member id does not belong to the event roster."""

    def __init__(self, member_id: str):
        super().__init__(f"Member '{member_id}' is not part of this event")
        self.member_id = member_id


class AutoAssignError(MatchingError):
    """Raised when auto-assignment produces no usable table."""


class InvalidMatchingError(MatchingError):
    """Raised when saving a session that does not pass validation."""

    def __init__(self, problems):
        super().__init__("Matching is not valid: " + "; ".join(problems))
        self.problems = list(problems)


class SessionClosedError(MatchingError):
    """Raised when editing a session that has already been persisted."""


class EventNotFoundError(MatchingError):
    """Raised when the event behind a session no longer exists."""

    def __init__(self, event_id: str):
        super().__init__(f"Event '{event_id}' not found")
        self.event_id = event_id


class EventStatusError(MatchingError):
    """Raised when an event is not in the status an action requires."""
