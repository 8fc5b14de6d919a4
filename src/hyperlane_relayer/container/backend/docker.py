"""Docker backend implementation.

Uses the docker CLI to manage the agent container.
"""

from __future__ import annotations

import logging
import subprocess
from typing import TYPE_CHECKING

from hyperlane_relayer.errors import ExternalToolFailure
from hyperlane_relayer.types.container import ContainerStatus

if TYPE_CHECKING:
    from hyperlane_relayer.types.container import ContainerSpec

logger = logging.getLogger(__name__)


class DockerBackend:
    """Docker implementation of ContainerBackend.

    Uses the docker CLI to manage containers.

    Args:
        docker: Name or path of the docker executable.
        timeout: Optional timeout in seconds for each docker call.
    """

    def __init__(self, docker: str = "docker", timeout: float | None = None) -> None:
        self._docker = docker
        self._timeout = timeout

    def image_pull(self, *, image: str) -> None:
        """Pull an image with `docker pull`."""
        logger.info("Pulling image %s", image)
        self._run(["pull", image], error=f"Docker pull failed for {image}")

    def container_create(self, *, spec: ContainerSpec) -> str:
        """Create a container with `docker create` and return its id."""
        args = ["create"]

        # Add volume bindings (host_path:container_path[:mode])
        for bind in spec.binds:
            args.extend(["-v", bind])

        # Add environment variables
        for key, value in spec.env.items():
            args.extend(["-e", f"{key}={value}"])

        args.append(spec.image)
        args.extend(spec.cmd)

        result = self._run(args, error=f"Failed to create container from {spec.image}", redact=True)
        container_id = result.stdout.strip()
        if not container_id:
            msg = "Docker create returned no container id"
            raise ExternalToolFailure(msg, command=["docker", "create"], returncode=result.returncode)
        return container_id

    def container_start(self, *, container_id: str) -> None:
        """Start a container with `docker start`."""
        self._run(["start", container_id], error=f"Failed to start container {container_id}")

    def container_status(self, *, container_id: str) -> ContainerStatus:
        """Inspect `.State.Running` of a container."""
        result = self._run(
            ["inspect", "--format", "{{.State.Running}}", container_id],
            error=f"Failed to get status of container {container_id}, Docker issue?",
        )
        if result.stdout.strip() == "true":
            return ContainerStatus.ACTIVE
        return ContainerStatus.INACTIVE

    def container_stop(self, *, container_id: str) -> None:
        """Stop a container with `docker stop`."""
        self._run(["stop", container_id], error=f"Failed to stop container {container_id}")

    def container_remove(self, *, container_id: str) -> None:
        """Remove a container with `docker rm`."""
        self._run(["rm", container_id], error=f"Failed to remove container {container_id}")

    def network_connect(self, *, container_id: str, network: str) -> None:
        """Attach a container to a network with `docker network connect`."""
        self._run(
            ["network", "connect", network, container_id],
            error=f"Failed to connect container {container_id} to network {network}",
        )

    def _run(self, args: list[str], *, error: str, redact: bool = False) -> subprocess.CompletedProcess:
        """Run a docker command and raise ExternalToolFailure on failure.

        Args:
            args: Command arguments (without the docker executable).
            error: Message used if the command fails.
            redact: If True, only the subcommand is kept in the error (the
                full command line may carry the signing key).
        """
        cmd = [self._docker, *args]
        shown = cmd[:2] if redact else cmd
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except FileNotFoundError as e:
            msg = "Docker command not found. Is Docker installed?"
            raise ExternalToolFailure(msg, command=shown) from e
        except subprocess.TimeoutExpired as e:
            msg = f"{error} (timed out after {self._timeout}s)"
            raise ExternalToolFailure(msg, command=shown) from e

        if result.returncode != 0:
            raise ExternalToolFailure(error, command=shown, returncode=result.returncode, stderr=result.stderr)
        return result


__all__ = ["DockerBackend"]
