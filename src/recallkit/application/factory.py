"""
Repository Factory
Centralizes the logic for selecting the storage adapter.
"""

import logging

from recallkit.application.config import AppConfig
from recallkit.domain.ports import StorageRepository
from recallkit.infrastructure.adapters.storage.json_store import JsonFileRepository
from recallkit.infrastructure.adapters.storage.memory import InMemoryRepository

logger = logging.getLogger(__name__)


def get_repository(config: AppConfig) -> StorageRepository:
    """
    Returns the StorageRepository implementation selected by config.
    """
    if config.backend == "memory":
        logger.debug("Storage: in-memory (nothing is persisted)")
        return InMemoryRepository()

    logger.debug(f"Storage: JSON files in {config.data_dir}")
    return JsonFileRepository(config.data_dir)
