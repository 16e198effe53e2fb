"""Command-line tools for LinkScout.

- ``python -m linkscout.cli import-catalog``: load releases/tracks from JSON
- ``python -m linkscout.cli discover``: discover and store platform links
"""
