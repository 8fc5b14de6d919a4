"""Container backend abstraction for the relayer agent.

This package provides a Protocol for container backends and a Docker implementation.
"""

from .docker import DockerBackend
from .protocol import ContainerBackend


def get_default_backend() -> ContainerBackend:
    """Get the default container backend (Docker)."""
    return DockerBackend()


__all__ = [
    "ContainerBackend",
    "DockerBackend",
    "get_default_backend",
]
