"""HTTP client for the relayer supervisor job endpoint."""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from typing import Any

from .types.config import SetConfigRequest

DEFAULT_URL = "http://127.0.0.1:8878"


def _decode(raw: bytes) -> dict[str, Any]:
    return json.loads(raw.decode("utf-8"))


class HttpClient:
    """HTTP client for submitting jobs to a running relayer supervisor.

    Args:
        base_url: Base URL of the supervisor. Defaults to http://127.0.0.1:8878.
        timeout: Request timeout in seconds. A set-config call waits for the
            agent's settle window, twice when a rollback happens, so the default
            is generous.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_URL,
        timeout: float = 300,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def _request(self, req: urllib.request.Request) -> dict[str, Any]:
        """Send a request and return the JSON body.

        Error responses from the supervisor carry a JSON body too; it is
        returned as-is, with "success" set to False.

        Raises:
            ConnectionError: If unable to connect to the supervisor.
            RuntimeError: If the supervisor returns an unparseable response.
        """
        req.add_header("Accept", "application/json")
        try:
            with urllib.request.urlopen(req, timeout=self._timeout) as response:
                return _decode(response.read())
        except urllib.error.HTTPError as e:
            try:
                return _decode(e.read())
            except (UnicodeDecodeError, json.JSONDecodeError):
                raise RuntimeError(f"Server error: HTTP {e.code}") from e
        except urllib.error.URLError as e:
            raise ConnectionError(f"Cannot connect to server: {e.reason}") from e
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise RuntimeError(f"Invalid JSON response: {e}") from e

    def set_config(self, configs: list[str] | None, relay_chains: str) -> dict[str, Any]:
        """Submit a set-config job and wait for its outcome.

        Args:
            configs: Config sources (literal documents, file:// or http(s):// URIs).
            relay_chains: Comma-separated relay chains.

        Returns:
            Dict with 'success', 'message', and 'details' ('value' is the job result).
        """
        body = SetConfigRequest(configs=configs, relay_chains=relay_chains).model_dump_json()
        req = urllib.request.Request(
            f"{self._base_url}/jobs/set-config",
            data=body.encode("utf-8"),
            method="POST",
            headers={"Content-Type": "application/json"},
        )
        return self._request(req)

    def status(self) -> dict[str, Any]:
        """Get the tracked container and last transaction phase."""
        return self._request(urllib.request.Request(f"{self._base_url}/status", method="GET"))


__all__ = ["DEFAULT_URL", "HttpClient"]
