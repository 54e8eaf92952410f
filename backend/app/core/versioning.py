"""Version Tokens — parse and format the optimistic-locking token of a Packstation.

Invariants:
    - A version token is a quoted non-negative integer: "0", "12"
    - A weak validator prefix (W/) is accepted and ignored
    - parse_version never returns a negative number

Design Decisions:
    - Pure functions, no framework types: shared by REST (If-Match, ETag) and GraphQL (update input)
"""

import re

from app.core.errors import VersionInvalidError

VERSION_PATTERN = re.compile(r'^(?:W/)?"(\d{1,9})"$')


def parse_version(token: str | None) -> int:
    """Extract the version number from an If-Match style token."""
    if token is None:
        raise VersionInvalidError(token)
    match = VERSION_PATTERN.match(token.strip())
    if not match:
        raise VersionInvalidError(token)
    return int(match.group(1))


def format_etag(version: int) -> str:
    return f'"{version}"'
