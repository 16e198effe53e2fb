"""Release discovery pipeline."""

from linkscout.pipeline.discovery import LinkDiscoveryPipeline

__all__ = ["LinkDiscoveryPipeline"]
