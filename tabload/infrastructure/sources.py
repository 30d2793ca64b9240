"""Source resolution for the readers.

A source is a local path, a URL, or an already-open file object. URLs are
downloaded with requests (optionally through the Redis byte cache) and
handed to pandas as an in-memory buffer.
"""
import io
import os
from pathlib import Path
from typing import Any, Optional, Tuple

import requests

from tabload.core.config import settings
from tabload.core.logging import get_logger, LogTimer

logger = get_logger(__name__)

URL_SCHEMES = ("http://", "https://", "ftp://")

_SUFFIX_COMPRESSION = {
    ".gz": "gzip",
    ".bz2": "bz2",
    ".xz": "xz",
    ".zip": "zip",
}

_cache = None


def is_url(source: Any) -> bool:
    return isinstance(source, str) and source.lower().startswith(URL_SCHEMES)


def source_label(source: Any) -> str:
    """Short human-readable name for a source, used in log records."""
    if isinstance(source, (str, os.PathLike)):
        return str(source)
    name = getattr(source, "name", None)
    if isinstance(name, str):
        return name
    return f"<{type(source).__name__}>"


def compression_for(url: str) -> Optional[str]:
    """Guess the compression of a remote file from its URL suffix."""
    path = url.split("?", 1)[0].split("#", 1)[0]
    return _SUFFIX_COMPRESSION.get(Path(path).suffix.lower())


def _get_cache():
    global _cache
    if _cache is None and settings.remote_cache_enabled:
        from tabload.infrastructure.redis import CacheManager
        _cache = CacheManager()
    return _cache


def fetch_url(url: str, timeout: Optional[float] = None) -> bytes:
    """Download ``url`` and return the body.

    HTTP errors propagate as ``requests.HTTPError``.
    """
    from tabload.infrastructure.redis import url_key

    cache = _get_cache()
    key = url_key(url)
    if cache is not None:
        cached = cache.get_bytes(key)
        if cached is not None:
            logger.debug(f"Using cached download for {url}")
            return cached

    with LogTimer(logger, "fetch_url", source=url) as timer:
        response = requests.get(url, timeout=timeout or settings.http_timeout)
        response.raise_for_status()
        payload = response.content
        timer.update(bytes=len(payload))

    if cache is not None:
        cache.set_bytes(key, payload)
    return payload


def open_source(source: Any) -> Tuple[Any, Optional[str]]:
    """Resolve ``source`` into something pandas can read.

    Returns:
        ``(handle, compression)`` where compression is ``"infer"`` for local
        paths, a scheme guessed from the URL for downloads, and None for
        file objects.
    """
    if is_url(source):
        return io.BytesIO(fetch_url(source)), compression_for(source)
    if isinstance(source, (str, os.PathLike)):
        return Path(source).expanduser(), "infer"
    if hasattr(source, "read"):
        return source, None
    raise TypeError(f"cannot read from a {type(source).__name__}; expected a path, URL or file object")
