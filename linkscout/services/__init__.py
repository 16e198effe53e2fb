"""Link resolution services."""

from linkscout.services.link_resolver import LinkResolver, resolve_provider_links
from linkscout.services.search_url_builder import build_search_url

__all__ = ["LinkResolver", "build_search_url", "resolve_provider_links"]
