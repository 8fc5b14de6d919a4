"""Container-related type definitions for the relayer agent."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class ContainerStatus(StrEnum):
    """Status of the agent container as reported by the container engine."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class SlotState(StrEnum):
    """Lifecycle of the single tracked agent container.

    ABSENT -> STARTING -> ACTIVE on success, ABSENT -> STARTING -> FAILED when the
    container was started but never reported active. STARTING and FAILED still
    carry the container identifier so removal can target it.
    """

    ABSENT = "absent"
    STARTING = "starting"
    ACTIVE = "active"
    FAILED = "failed"


class ContainerSpec(BaseModel):
    """Everything needed to create the agent container.

    Attributes:
        image: Image to create the container from.
        binds: Volume bindings in ``host_path:container_path[:mode]`` form.
        env: Environment variables passed to the agent.
        cmd: Command line run inside the container.
        network: Internal network to attach after creation (test mode only).
    """

    model_config = ConfigDict(frozen=True)

    image: str = Field(description="Image to create the container from")
    binds: tuple[str, ...] = Field(default=(), description="Volume bindings (host:container[:mode])")
    env: dict[str, str] = Field(default_factory=dict, description="Environment variables for the agent")
    cmd: tuple[str, ...] = Field(default=(), description="Command line run inside the container")
    network: str | None = Field(default=None, description="Network to attach before start (test mode)")

    def __repr__(self) -> str:
        # The command line embeds the signing key.
        return f"ContainerSpec(image={self.image!r}, binds={self.binds!r}, network={self.network!r})"

    __str__ = __repr__


class SlotSnapshot(BaseModel):
    """Point-in-time view of the container slot.

    Attributes:
        state: Current slot state.
        container_id: Identifier of the tracked container, if any.
    """

    model_config = ConfigDict(frozen=True)

    state: SlotState = Field(description="Current slot state")
    container_id: str | None = Field(default=None, description="Tracked container identifier")


__all__ = [
    "ContainerSpec",
    "ContainerStatus",
    "SlotSnapshot",
    "SlotState",
]
