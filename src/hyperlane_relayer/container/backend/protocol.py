"""Container backend protocol definition.

Defines the container engine operations the supervisor relies on, so the
Docker implementation can be swapped (Podman, or a fake in tests).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from hyperlane_relayer.types.container import ContainerSpec, ContainerStatus


class ContainerBackend(Protocol):
    """Protocol for container backend implementations.

    Every method makes a single attempt and raises ``ExternalToolFailure``
    when the engine reports an error.
    """

    def image_pull(self, *, image: str) -> None:
        """Make sure an image is present locally.

        Args:
            image: Image reference to pull.
        """
        ...

    def container_create(self, *, spec: ContainerSpec) -> str:
        """Create (but do not start) a container.

        Args:
            spec: Image, bindings, environment and command of the container.

        Returns:
            Identifier of the created container.
        """
        ...

    def container_start(self, *, container_id: str) -> None:
        """Start a created container."""
        ...

    def container_status(self, *, container_id: str) -> ContainerStatus:
        """Get whether a container is currently active.

        Args:
            container_id: Container to inspect.

        Returns:
            ContainerStatus.ACTIVE if running, ContainerStatus.INACTIVE otherwise.
        """
        ...

    def container_stop(self, *, container_id: str) -> None:
        """Stop a running container."""
        ...

    def container_remove(self, *, container_id: str) -> None:
        """Remove a stopped container."""
        ...

    def network_connect(self, *, container_id: str, network: str) -> None:
        """Attach a container to a network.

        Args:
            container_id: Container to attach.
            network: Network name.
        """
        ...


__all__ = ["ContainerBackend"]
