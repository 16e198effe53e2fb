"""Link repositories: in-memory and SQLite."""

from linkscout.providers.repository.memory_repository import MemoryLinkRepository
from linkscout.providers.repository.sqlite_repository import SQLiteLinkRepository

__all__ = ["MemoryLinkRepository", "SQLiteLinkRepository"]
