"""State store: runs engine transitions against the persisted snapshot, one writer at a time"""

import threading
from typing import Any, Callable

from sqlalchemy.orm import Session

from credimanager.domain.models import PortfolioState
from credimanager.domain.reconciliation import Transition
from credimanager.infrastructure.database.repositories import SnapshotRepository

# Transitions must not interleave: load -> apply -> save is one critical section
_write_lock = threading.Lock()


class StateStore:
    """Loads the current snapshot and commits transition results"""

    def __init__(self, db: Session, key: str):
        self.db = db
        self.repository = SnapshotRepository(db, key)

    def current(self) -> PortfolioState:
        return self.repository.load_state()

    def apply(self, transition: Callable[..., Transition], *args: Any, **kwargs: Any) -> Transition:
        """
        Apply one engine operation and persist its result.

        No-op transitions are not written. Any exception rolls the session back
        and leaves the stored snapshot untouched.
        """
        with _write_lock:
            try:
                result = transition(self.repository.load_state(), *args, **kwargs)
                if result.applied:
                    self.repository.save_state(result.state)
                    self.db.commit()
                return result
            except Exception:
                self.db.rollback()
                raise
