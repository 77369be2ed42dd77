"""
Storage Backend Factory.

Centralizes backend selection so the rest of RecallForge only sees a
StudyItemRepository.

    get_repository(config)
        ├── "sqlite" → SQLiteRepository  (config.database_path)
        ├── "memory" → InMemoryRepository
        └── <registered name> → creator(config)

Backend Registration
--------------------
    from recallforge.storage.factory import register_backend

    def create_json_backend(config):
        return JsonRepository(config.base_path / "items.json")

    register_backend("json", create_json_backend)

    # config.yaml:
    # storage:
    #   backend: json
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from recallforge.core.config import STORAGE_BACKENDS, Config
from recallforge.core.exceptions import ConfigValidationError
from recallforge.core.logging import get_logger
from recallforge.storage.base import StudyItemRepository

BackendCreator = Callable[[Config], StudyItemRepository]

_backend_registry: Dict[str, BackendCreator] = {}

logger = get_logger(__name__)


def register_backend(name: str, creator: BackendCreator) -> None:
    """Register a custom storage backend.

    Args:
        name: Backend identifier used in storage.backend
        creator: Function that takes Config and returns a repository
    """
    _backend_registry[name.lower()] = creator
    logger.info("Registered storage backend", backend=name)


def unregister_backend(name: str) -> bool:
    """Remove a custom backend. Returns False if it was not registered."""
    return _backend_registry.pop(name.lower(), None) is not None


def list_backends() -> List[str]:
    """Builtin backend names followed by registered ones."""
    custom = [name for name in _backend_registry if name not in STORAGE_BACKENDS]
    return list(STORAGE_BACKENDS) + custom


def get_repository(
    config: Config,
    backend: Optional[str] = None,
) -> StudyItemRepository:
    """
    Create the repository selected by configuration.

    Registered backends take precedence over builtin ones.

    Args:
        config: RecallForge configuration
        backend: Override for config.storage.backend

    Returns:
        StudyItemRepository instance

    Raises:
        ConfigValidationError: If the backend name is unknown
    """
    backend_type = (backend or config.storage.backend).lower()

    if backend_type in _backend_registry:
        logger.info("Using registered storage backend", backend=backend_type)
        return _backend_registry[backend_type](config)

    if backend_type == "sqlite":
        from recallforge.storage.sqlite import SQLiteRepository

        logger.info("Using SQLite storage backend", path=str(config.database_path))
        return SQLiteRepository(config.database_path)

    if backend_type == "memory":
        from recallforge.storage.memory import InMemoryRepository

        logger.info("Using in-memory storage backend")
        return InMemoryRepository()

    raise ConfigValidationError(
        "storage.backend",
        backend_type,
        f"available backends: {', '.join(list_backends())}",
    )
