# Infrastructure Storage Adapters Package
from .json_store import JsonFileRepository
from .memory import InMemoryRepository

__all__ = ["JsonFileRepository", "InMemoryRepository"]
