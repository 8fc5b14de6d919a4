"""Resolution of configuration sources to document content.

A source is one of:

- ``file:///abs/path.json``: read from the local filesystem
- ``http://...`` / ``https://...``: fetched over HTTP
- anything else: used verbatim as the document
"""

from __future__ import annotations

import logging
import urllib.error
import urllib.parse
import urllib.request
from pathlib import Path
from typing import Protocol

from .errors import ConfigSourceError

logger = logging.getLogger(__name__)

FILE_SCHEME = "file://"
HTTP_SCHEMES = ("http://", "https://")


class SourceResolver(Protocol):
    """Turns a config source into document content."""

    def resolve(self, source: str) -> str:
        """Return the document the source refers to.

        Raises:
            ConfigSourceError: If the source cannot be read.
        """
        ...


class DefaultSourceResolver:
    """Resolves literal, file:// and http(s):// config sources.

    Args:
        timeout: HTTP request timeout in seconds.
    """

    def __init__(self, timeout: float = 30.0) -> None:
        self._timeout = timeout

    def resolve(self, source: str) -> str:
        if source.startswith(FILE_SCHEME):
            return self._read_file(source)
        if source.startswith(HTTP_SCHEMES):
            return self._fetch(source)
        return source

    def _read_file(self, source: str) -> str:
        parsed = urllib.parse.urlparse(source)
        if parsed.netloc not in ("", "localhost"):
            raise ConfigSourceError(source, f"remote file host `{parsed.netloc}` is not supported")

        path = Path(urllib.parse.unquote(parsed.path))
        logger.debug("Reading config source from `%s`", path)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigSourceError(source, str(exc)) from exc

    def _fetch(self, source: str) -> str:
        logger.debug("Fetching config source `%s`", source)
        req = urllib.request.Request(source, method="GET")
        try:
            with urllib.request.urlopen(req, timeout=self._timeout) as response:
                return response.read().decode("utf-8")
        except urllib.error.HTTPError as exc:
            raise ConfigSourceError(source, f"HTTP {exc.code}") from exc
        except urllib.error.URLError as exc:
            raise ConfigSourceError(source, f"cannot connect: {exc.reason}") from exc
        except (TimeoutError, UnicodeDecodeError) as exc:
            raise ConfigSourceError(source, str(exc)) from exc


__all__ = ["DefaultSourceResolver", "SourceResolver"]
