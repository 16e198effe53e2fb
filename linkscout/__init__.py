"""LinkScout: discover a release's page on every streaming platform from its ISRCs."""

__version__ = "0.1.0"
