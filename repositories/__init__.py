"""
Repository layer - remote backends and the entity stores over them.

Usage:
    from repositories import get_backend, TaskStore

    tasks = TaskStore(get_backend())
    await tasks.list()

Backends are swappable via config.
"""

from .base import RemoteBackend, RemoteResponse, RemoteError
from .memory_backend import MemoryBackend
from .json_backend import JsonBackend
from .auth import AuthBackend, MemoryAuthBackend, JsonAuthBackend
from .store import EntityStore
from .tasks import TaskStore
from .articles import ArticleStore, enforce_news_visibility
from .team import TeamStore

# Default backend - can be changed via config
_backend: str = "memory"
_options: dict = {}
_instance: RemoteBackend = None
_auth_instance: AuthBackend = None


def get_backend() -> RemoteBackend:
    """Get the configured backend instance."""
    global _instance

    if _instance is None:
        if _backend == "memory":
            _instance = MemoryBackend(latency=_options.get("latency", 0.0))
        elif _backend == "json":
            _instance = JsonBackend(_options.get("data_dir"))
        else:
            raise ValueError(f"Unknown backend: {_backend}")

    return _instance


def get_auth_backend() -> AuthBackend:
    """Identity service matching the configured backend."""
    global _auth_instance

    if _auth_instance is None:
        if _backend == "json":
            _auth_instance = JsonAuthBackend(_options.get("data_dir"))
        else:
            _auth_instance = MemoryAuthBackend()

    return _auth_instance


def configure_backend(backend: str, **kwargs) -> None:
    """Configure the backend. Takes effect on the next get_*() call."""
    global _backend, _options, _instance, _auth_instance
    _backend = backend
    _options = kwargs
    _instance = None  # Force re-initialization
    _auth_instance = None


__all__ = [
    "get_backend",
    "get_auth_backend",
    "configure_backend",
    "RemoteBackend",
    "RemoteResponse",
    "RemoteError",
    "MemoryBackend",
    "JsonBackend",
    "AuthBackend",
    "MemoryAuthBackend",
    "JsonAuthBackend",
    "EntityStore",
    "TaskStore",
    "ArticleStore",
    "TeamStore",
    "enforce_news_visibility",
]
