"""Abstract contracts (adapter pattern) for swappable LinkScout backends."""

from linkscout.interfaces.cache_provider import ICacheProvider
from linkscout.interfaces.link_repository import ILinkRepository
from linkscout.interfaces.link_source import ILinkSource

__all__ = ["ICacheProvider", "ILinkRepository", "ILinkSource"]
