"""Text normalization for ISRCs and search queries.

ISRCs arrive from Spotify imports, CSV uploads and catalog APIs in every
shape imaginable: lower case, hyphenated (``US-UM7-22-12345``), padded
with whitespace.  Catalog APIs only match the compact upper-case form, so
every lookup key goes through :func:`normalize_isrc` first.

The search query helpers build the ``"artist title"`` string the
search-URL builder encodes into each platform's template.
"""

import re

# CC-XXX-YY-NNNNN: 2-letter country, 3 alphanumerics registrant,
# 2-digit year, 5-digit designation.
_ISRC_PATTERN = re.compile(r"^[A-Z]{2}[A-Z0-9]{3}\d{7}$")
_ISRC_SEPARATORS = re.compile(r"[\s\-_.]")


def normalize_isrc(isrc: str | None) -> str | None:
    """Return the compact upper-case form of *isrc*, or ``None`` if blank.

    Separators (spaces, hyphens, underscores, dots) are removed.  The value
    is not rejected when it fails :func:`is_valid_isrc`; catalogs are lenient
    and a near-miss still occasionally resolves.

    Args:
        isrc: Raw ISRC string as stored on the track.

    Returns:
        Normalized ISRC, or ``None`` for ``None``/empty input.
    """
    if isrc is None:
        return None
    compact = _ISRC_SEPARATORS.sub("", isrc).upper()
    return compact or None


def is_valid_isrc(isrc: str | None) -> bool:
    """Return ``True`` if *isrc* (after normalization) is well formed."""
    normalized = normalize_isrc(isrc)
    return bool(normalized and _ISRC_PATTERN.match(normalized))


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace into single spaces and strip the ends."""
    return re.sub(r"\s+", " ", text).strip()


def build_search_query(artist_name: str, title: str, isrc: str | None = None) -> str:
    """Build the free-text query used for platform search URLs.

    ``"{artist} {title}"`` when either part is present, otherwise the ISRC,
    otherwise an empty string.
    """
    query = collapse_whitespace(f"{artist_name or ''} {title or ''}")
    if query:
        return query
    return normalize_isrc(isrc) or ""
