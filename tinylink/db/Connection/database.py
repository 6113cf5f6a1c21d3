import logging
import threading
from typing import Optional

from tinylink.core.config import Settings, settings
from tinylink.core.exceptions import StorageUnavailableError
from tinylink.db.base import LinkStorage
from tinylink.db.file_storage import FileLinkStorage
from tinylink.db.repository import SQLLinkStorage

logger = logging.getLogger(__name__)

_storage: Optional[LinkStorage] = None
_storage_lock = threading.Lock()


def build_storage(config: Settings = settings) -> LinkStorage:
    """Pick the backend once, from configuration."""
    backend = config.storage_backend
    if backend == "sql":
        if not config.DATABASE_URL:
            raise RuntimeError("STORAGE_BACKEND=sql requires DATABASE_URL")
        storage = SQLLinkStorage(database_url=config.DATABASE_URL)
    elif backend == "file":
        storage = FileLinkStorage(config.DATA_FILE)
    else:
        raise RuntimeError(f"Unknown STORAGE_BACKEND '{backend}', expected 'file' or 'sql'")
    logger.info("Link storage backend selected: %s", storage.name)
    return storage


def get_storage() -> LinkStorage:
    """FastAPI dependency: the process-wide storage instance, built on first use."""
    global _storage
    if _storage is None:
        with _storage_lock:
            if _storage is None:
                _storage = build_storage(settings)
    return _storage


def get_optional_storage() -> Optional[LinkStorage]:
    """Like get_storage, but None when the backend cannot be built."""
    try:
        return get_storage()
    except StorageUnavailableError as e:
        logger.error("Link storage (%s) unavailable: %s", settings.storage_backend, e)
        return None


def close_storage():
    global _storage
    if _storage is not None:
        _storage.close()
        _storage = None


def verify_storage_connection(storage: LinkStorage) -> bool:
    if storage.health_check():
        logger.info("Link storage (%s) verified", storage.name)
        return True
    logger.error("Link storage (%s) is not reachable", storage.name)
    return False
