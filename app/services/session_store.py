"""
In-memory store of working matching sessions
"""

import logging
from typing import Callable, Dict, Optional

from app.matching import MatchingSession

logger = logging.getLogger(__name__)

class SessionStore:
    """Holds one working session per event until it is saved or discarded.

    Two operators editing the same event share one session object; nothing
    here coordinates their edits and the last save wins.
    """

    def __init__(self):
        # event_id -> working session
        self.sessions: Dict[str, MatchingSession] = {}

    def get(self, event_id: str) -> Optional[MatchingSession]:
        return self.sessions.get(event_id)

    def open(
        self,
        event_id: str,
        loader: Callable[[], Optional[MatchingSession]],
        reload: bool = False
    ) -> Optional[MatchingSession]:
        """Return the working session, loading it on first use or on request"""
        session = self.sessions.get(event_id)
        if session is None or session.persisted or reload:
            session = loader()
            if session is None:
                return None
            self.sessions[event_id] = session
            logger.info(f"Opened matching session for event {event_id}. Open sessions: {len(self.sessions)}")
        return session

    def discard(self, event_id: str) -> bool:
        """Drop working state; the next open reloads from storage"""
        removed = self.sessions.pop(event_id, None) is not None
        if removed:
            logger.info(f"Discarded matching session for event {event_id}")
        return removed

# Global session store instance
session_store = SessionStore()
