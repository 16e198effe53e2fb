"""Concrete adapters: HTTP transport, caches, catalog lookups, repositories."""
