"""HTTP transport shared by the catalog lookups."""

from linkscout.providers.http.resilient_client import ResilientHttpClient

__all__ = ["ResilientHttpClient"]
