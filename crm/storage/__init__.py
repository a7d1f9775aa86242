"""Storage backends."""

from typing import Optional

from loguru import logger

from config import DATA_DIR
from .base import Storage
from .database import SqlStorage
from .memory import MemoryStorage
from .seed import seed_storage


def create_storage(config: Optional[dict] = None) -> Storage:
    """
    Build the storage backend named in the configuration.

    Args:
        config: Application configuration dictionary

    Returns:
        Storage backend, seeded when ``storage.seed`` is set and it is empty

    Raises:
        ValueError: If the backend name is unknown
    """
    config = config or {}
    storage_config = config.get("storage", {})
    backend = storage_config.get("backend", "memory")

    if backend == "memory":
        storage = MemoryStorage()
    elif backend == "sql":
        db_config = config.get("database", {})
        url = db_config.get("url")
        if not url:
            DATA_DIR.mkdir(parents=True, exist_ok=True)
            url = f"sqlite:///{DATA_DIR}/crm.db"
        storage = SqlStorage(url, echo=db_config.get("echo", False))
    else:
        raise ValueError(f"Unknown storage backend '{backend}', expected 'memory' or 'sql'")

    logger.info(f"Using {backend} storage backend")

    if storage_config.get("seed", True) and storage.is_empty():
        seed_storage(storage)

    return storage


__all__ = ["MemoryStorage", "SqlStorage", "Storage", "create_storage", "seed_storage"]
