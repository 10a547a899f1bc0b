# turtle_backend/core/state.py
"""
SharedState: Top-level container for the live application objects.
"""
from dataclasses import dataclass, field
from typing import Optional

from ..store.path_store import PathStore
from .session import SessionManager


@dataclass
class SharedState:
    """
    Shared state container accessible across the application.
    The path store is opened on startup; sessions come and go with sockets.
    """
    store: Optional[PathStore] = None
    sessions: SessionManager = field(default_factory=SessionManager)

    def attach_store(self, store: PathStore):
        """Install the path store and hand it to the session manager."""
        self.store = store
        self.sessions.store = store
