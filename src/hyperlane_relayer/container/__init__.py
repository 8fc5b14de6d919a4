"""Container management for the relayer agent.

This package builds the agent container spec, and starts, checks and removes
the single agent container through a container backend.
"""

from .backend import ContainerBackend, DockerBackend, get_default_backend
from .launcher import AgentLauncher
from .supervisor import ContainerSlot, ContainerSupervisor

__all__ = [
    "AgentLauncher",
    "ContainerBackend",
    "ContainerSlot",
    "ContainerSupervisor",
    "DockerBackend",
    "get_default_backend",
]
