# turtle_backend/api/deps.py
"""
Dependency injection for API routes.
"""
from fastapi import HTTPException

from ..core import SharedState
from ..core.session import SessionManager
from ..store.path_store import PathStore

# Global shared state instance
_shared: SharedState = None


def get_shared() -> SharedState:
    """Get the global shared state."""
    global _shared
    if _shared is None:
        _shared = SharedState()
    return _shared


def set_shared(shared: SharedState):
    """Set the global shared state (called during app startup and by tests)."""
    global _shared
    _shared = shared


def get_sessions() -> SessionManager:
    """Get the live session manager."""
    return get_shared().sessions


def get_store() -> PathStore:
    """Get the path store; 503 until startup has opened it."""
    store = get_shared().store
    if store is None:
        raise HTTPException(status_code=503, detail="path store not available")
    return store
