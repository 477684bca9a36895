"""
Session store for adapters that keep horizons server-side.

Each session owns one Horizon and one lock; a turn runs entirely inside
that lock so concurrent requests against the same session serialize,
while independent sessions proceed in parallel.
"""

import threading
import uuid
from typing import Dict, Optional
from uuid import UUID

from .driver import SimulationService
from .errors import EntityNotFoundError
from .world import Horizon


class _Session:
    def __init__(self, horizon: Horizon):
        self.horizon = horizon
        self.lock = threading.Lock()


class SessionStore:
    """Maps session ids to horizons held on behalf of callers."""

    def __init__(self, service: SimulationService):
        self.service = service
        self._sessions: Dict[UUID, _Session] = {}
        self._registry_lock = threading.Lock()

    def create(self, count: int) -> UUID:
        """Start a new simulation and return its session id."""
        horizon = self.service.init_new_simulation(count)
        session_id = uuid.uuid4()
        with self._registry_lock:
            self._sessions[session_id] = _Session(horizon)
        return session_id

    def get(self, session_id: UUID) -> Horizon:
        return self._session(session_id).horizon

    def step(self, session_id: UUID, user_id: Optional[str] = None) -> Horizon:
        """Run one turn for the session; one critical section per turn."""
        session = self._session(session_id)
        with session.lock:
            session.horizon = self.service.run_next_simulation(session.horizon, user_id)
            return session.horizon

    def reset(self, session_id: UUID) -> Horizon:
        session = self._session(session_id)
        with session.lock:
            session.horizon = self.service.reset_simulation(session.horizon)
            return session.horizon

    def discard(self, session_id: UUID):
        with self._registry_lock:
            if self._sessions.pop(session_id, None) is None:
                raise EntityNotFoundError(f"Session {session_id} not found")

    def __len__(self) -> int:
        return len(self._sessions)

    def _session(self, session_id: UUID) -> _Session:
        with self._registry_lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise EntityNotFoundError(f"Session {session_id} not found")
        return session
