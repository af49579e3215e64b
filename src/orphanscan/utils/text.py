"""Text helpers for building substring search patterns."""

from __future__ import annotations

import posixpath
from urllib.parse import urlsplit

LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    """Escape SQL ``LIKE`` metacharacters so ``value`` matches literally.

    Used together with ``ESCAPE '\\'`` in the query.
    """
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def like_contains(value: str) -> str:
    """Pattern matching any text that contains ``value``."""
    return f"%{escape_like(value)}%"


def url_basename(url: str) -> str:
    """Return the file name of the URL's path, or an empty string.

    >>> url_basename("https://cdn.example.com/uploads/2024/05/photo.jpg?ver=2")
    'photo.jpg'
    """
    try:
        path = urlsplit(url.strip()).path
    except ValueError:
        return ""
    if not path:
        return ""
    return posixpath.basename(path)
