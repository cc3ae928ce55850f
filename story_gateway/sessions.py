"""In-memory session store mapping session ids to adventure settings.

Sessions live for the lifetime of the process. Every `put` mints a new id;
there is no update or delete.
"""

from __future__ import annotations

import logging
import threading
import uuid

from .models import AdventureSettings

logger = logging.getLogger(__name__)


class SessionStore:
    """Thread-safe map of session id -> AdventureSettings."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sessions: dict[str, AdventureSettings] = {}

    def put(self, settings: AdventureSettings) -> str:
        """Store settings under a fresh random id and return the id."""
        session_id = str(uuid.uuid4())
        with self._lock:
            self._sessions[session_id] = settings
        logger.debug("session created id=%s", session_id)
        return session_id

    def get(self, session_id: str | None) -> AdventureSettings:
        """Return the settings for `session_id`, or the defaults on a miss."""
        if session_id:
            with self._lock:
                settings = self._sessions.get(session_id)
            if settings is not None:
                return settings
            logger.info("Unknown session %s, using default settings", session_id)
        return AdventureSettings()

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
