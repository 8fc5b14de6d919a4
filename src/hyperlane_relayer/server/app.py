"""HTTP job endpoint and process lifecycle for the relayer supervisor."""

from __future__ import annotations

import asyncio
import json
import logging
import signal
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

from pydantic import ValidationError

from .._internal.config import load_settings
from .._internal.logging import configure_logging
from ..coordinator import SET_CONFIG_JOB_ID, ConfigTransactionCoordinator
from ..errors import InvalidInput, RelayerError
from ..store import ConfigStore, data_dir_lock
from ..types.config import SetConfigRequest

if TYPE_CHECKING:
    from collections.abc import Coroutine
    from types import FrameType

    from .._internal.config import RelayerSettings
    from ..container import ContainerBackend
    from ..keys import KeyMaterial

logger = logging.getLogger(__name__)

SET_CONFIG_PATHS = frozenset({"/jobs/set-config", f"/jobs/{SET_CONFIG_JOB_ID}"})
MAX_BODY_BYTES = 16 * 1024 * 1024


class JobRunner:
    """Runs coroutines on one dedicated event loop thread.

    Request handler threads hand their jobs to this loop, so every job shares the
    coordinator's and supervisor's asyncio locks.
    """

    def __init__(self) -> None:
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._loop.run_forever, name="relayer-jobs", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def run(self, coro: Coroutine[Any, Any, Any]) -> Any:
        """Run a coroutine on the loop and block until it finishes."""
        return asyncio.run_coroutine_threadsafe(coro, self._loop).result()

    def stop(self) -> None:
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join()
        self._loop.close()


def _error_payload(exc: Exception) -> dict[str, Any]:
    return {
        "success": False,
        "message": str(exc),
        "details": {"error": type(exc).__name__},
    }


def _create_handler(coordinator: ConfigTransactionCoordinator, runner: JobRunner) -> type:
    """Create a request handler class bound to a coordinator.

    Args:
        coordinator: Coordinator that runs set-config jobs.
        runner: Event loop the jobs run on.

    Returns:
        A BaseHTTPRequestHandler subclass.
    """

    class RelayerJobHandler(BaseHTTPRequestHandler):
        """HTTP request handler for the relayer job API."""

        def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
            """Override to use our logger instead of stderr."""
            logger.info("%s - %s", self.address_string(), format % args)

        def _send_json(self, data: dict[str, Any], status_code: int = 200) -> None:
            """Send a JSON response."""
            body = json.dumps(data, indent=2).encode("utf-8")
            self.send_response(status_code)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def _read_json(self) -> Any:
            """Read and decode the JSON request body."""
            header = self.headers.get("Content-Length") or "0"
            try:
                length = int(header)
            except ValueError as e:
                msg = f"Invalid Content-Length header: {header!r}"
                raise InvalidInput(msg) from e
            if length < 0:
                msg = f"Invalid Content-Length header: {header!r}"
                raise InvalidInput(msg)
            if length > MAX_BODY_BYTES:
                msg = f"Request body too large ({length} bytes)"
                raise InvalidInput(msg)
            raw = self.rfile.read(length) if length else b""
            try:
                return json.loads(raw or b"{}")
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                msg = f"Invalid JSON body: {e}"
                raise InvalidInput(msg) from e

        def do_GET(self) -> None:
            """Handle GET requests."""
            path = urlparse(self.path).path

            if path == "/status":
                snapshot = runner.run(coordinator.supervisor.snapshot())
                self._send_json(
                    {
                        "success": True,
                        "message": "",
                        "details": {
                            "slot": snapshot.model_dump(mode="json"),
                            "phase": coordinator.phase.value,
                            "has_backup": coordinator.store.has_backup,
                        },
                    }
                )
            else:
                self._send_json({"success": False, "error": "Not found"}, 404)

        def do_POST(self) -> None:
            """Handle POST requests."""
            path = urlparse(self.path).path

            if path not in SET_CONFIG_PATHS:
                self._send_json({"success": False, "error": "Not found"}, 404)
                return

            try:
                try:
                    request = SetConfigRequest.model_validate(self._read_json())
                except ValidationError as e:
                    msg = f"Invalid set-config arguments: {e}"
                    raise InvalidInput(msg) from e
                value = runner.run(coordinator.set_config(request.configs, request.relay_chains))
            except InvalidInput as e:
                logger.warning("Rejected set-config call: %s", e)
                self._send_json(_error_payload(e), 400)
                return
            except RelayerError as e:
                logger.error("set-config failed: %s", e)
                self._send_json(_error_payload(e), 500)
                return

            self._send_json({"success": True, "message": "Configuration applied", "details": {"value": value}})

    return RelayerJobHandler


def create_server(
    coordinator: ConfigTransactionCoordinator,
    runner: JobRunner,
    host: str = "127.0.0.1",
    port: int = 0,
) -> ThreadingHTTPServer:
    """Create (but do not start serving) the job endpoint.

    Args:
        coordinator: Coordinator that runs set-config jobs.
        runner: Started JobRunner the jobs run on.
        host: Host to bind to.
        port: Port to listen on. 0 picks a free port.
    """
    handler = _create_handler(coordinator, runner)
    return ThreadingHTTPServer((host, port), handler)


def _raise_keyboard_interrupt(signum: int, frame: FrameType | None) -> None:
    raise KeyboardInterrupt


def run_server(
    settings: RelayerSettings | None = None,
    *,
    backend: ContainerBackend | None = None,
    key_material: KeyMaterial | None = None,
) -> None:
    """Run the relayer supervisor until interrupted.

    Owns the data directory for the lifetime of the process, serves set-config
    jobs, and removes the agent container on shutdown.

    Args:
        settings: Settings to run with. Defaults to the environment.
        backend: Container backend override. Defaults to Docker.
        key_material: Signing key override. Defaults to the configured keystore.
    """
    configure_logging()

    if settings is None:
        settings = load_settings()

    ConfigStore(settings.data_dir).ensure_data_dir()

    with data_dir_lock(settings.data_dir):
        coordinator = ConfigTransactionCoordinator.from_settings(
            settings, backend=backend, key_material=key_material
        )
        runner = JobRunner()
        runner.start()

        server = create_server(coordinator, runner, settings.host, settings.port)
        signal.signal(signal.SIGTERM, _raise_keyboard_interrupt)
        logger.info("Relayer supervisor for `%s` listening on %s:%d", settings.data_dir, settings.host, settings.port)
        print(f"Relayer supervisor running at http://{settings.host}:{settings.port}")
        print("Press Ctrl+C to stop")

        try:
            server.serve_forever()
        except KeyboardInterrupt:
            logger.info("Server stopped")
            print("\nServer stopped")
        finally:
            server.server_close()
            try:
                runner.run(coordinator.shutdown())
            finally:
                runner.stop()
