from .repository import InMemoryRepository, JsonFileRepository, StateRepository
from .store import StateStore

__all__ = ["StateRepository", "JsonFileRepository", "InMemoryRepository", "StateStore"]
