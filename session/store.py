# SPDX-License-Identifier: AGPL-3.0-only

"""
Session storage (in-memory; migrate to DB later).

Callers that mutate a session must hold `store.lock` for the whole
read-modify-write. Sessions older than `max_age_hours` are dropped whenever a
new one is added.
"""

import logging
import threading
import time
from typing import Dict, List, Optional

from common.config import config
from common.errors import NotFoundError
from .models import StudySession

logger = logging.getLogger(__name__)


class SessionStore:

    def __init__(self, max_age_hours: float = None):
        self._sessions: Dict[str, StudySession] = {}
        self.lock = threading.RLock()
        self.max_age_hours = config.purge_after_hours if max_age_hours is None else max_age_hours

    def add(self, session: StudySession) -> StudySession:
        with self.lock:
            self.expire()
            self._sessions[session.id] = session
        return session

    def find(self, session_id: str) -> Optional[StudySession]:
        with self.lock:
            return self._sessions.get(session_id)

    def get(self, session_id: str) -> StudySession:
        session = self.find(session_id)
        if session is None:
            raise NotFoundError("Session not found")
        return session

    def remove(self, session_id: str) -> None:
        with self.lock:
            if self._sessions.pop(session_id, None) is None:
                raise NotFoundError("Session not found")

    def expire(self, now: float = None) -> List[str]:
        """Drop sessions created more than `max_age_hours` ago; returns their ids."""
        cutoff = (time.time() if now is None else now) - self.max_age_hours * 3600
        with self.lock:
            stale = [sid for sid, s in self._sessions.items() if s.created_at < cutoff]
            for sid in stale:
                del self._sessions[sid]
        if stale:
            logger.info("Expired %d session(s)", len(stale))
        return stale

    def clear(self) -> int:
        with self.lock:
            count = len(self._sessions)
            self._sessions.clear()
        return count

    def __len__(self):
        with self.lock:
            return len(self._sessions)


# Global store instance
sessions = SessionStore()
