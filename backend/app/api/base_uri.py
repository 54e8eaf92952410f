"""Base URI of the Packstation collection, derived from the current request."""

import re

from fastapi import Request

_TRAILING_ID = re.compile(r"/\d+$")


def get_base_uri(request: Request) -> str:
    """Request URL without query string, trailing slash or trailing id segment."""
    url = str(request.url.replace(query="")).rstrip("/")
    return _TRAILING_ID.sub("", url)
