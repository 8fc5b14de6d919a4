"""Supervisor for the single relayer agent container.

At most one agent container is tracked at a time. The tracked container lives
in a ``ContainerSlot``, and every operation on it runs under the slot's lock.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from hyperlane_relayer._internal.config import DEFAULT_SETTLE_SECONDS
from hyperlane_relayer.errors import ExternalToolFailure, StartFailed
from hyperlane_relayer.types.container import ContainerStatus, SlotSnapshot, SlotState

if TYPE_CHECKING:
    from .backend import ContainerBackend
    from .launcher import AgentLauncher

logger = logging.getLogger(__name__)


class ContainerSlot:
    """Exclusively guarded record of the tracked agent container.

    The state and identifier must only be read or changed while holding ``lock``.
    """

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self._state = SlotState.ABSENT
        self._container_id: str | None = None

    @property
    def state(self) -> SlotState:
        return self._state

    @property
    def container_id(self) -> str | None:
        return self._container_id

    def record(self, state: SlotState, container_id: str) -> None:
        """Track a container in the given (non-absent) state."""
        if state is SlotState.ABSENT:
            msg = "Use take() to clear the slot"
            raise ValueError(msg)
        self._state = state
        self._container_id = container_id

    def take(self) -> str | None:
        """Clear the slot and return the identifier it held, if any."""
        container_id = self._container_id
        self._state = SlotState.ABSENT
        self._container_id = None
        return container_id

    def snapshot(self) -> SlotSnapshot:
        return SlotSnapshot(state=self._state, container_id=self._container_id)


class ContainerSupervisor:
    """Creates, starts and removes the agent container.

    Args:
        backend: Container engine client.
        launcher: Builds the container spec from the current configuration.
        settle_seconds: Delay between start and the single status check.

    Example:
        >>> supervisor = ContainerSupervisor(backend=DockerBackend(), launcher=launcher)
        >>> await supervisor.spinup()
        >>> await supervisor.remove_existing()
    """

    def __init__(
        self,
        *,
        backend: ContainerBackend,
        launcher: AgentLauncher,
        settle_seconds: float = DEFAULT_SETTLE_SECONDS,
    ) -> None:
        self.backend = backend
        self.launcher = launcher
        self.settle_seconds = settle_seconds
        self._slot = ContainerSlot()

    async def snapshot(self) -> SlotSnapshot:
        """Current slot state and tracked container."""
        async with self._slot.lock:
            return self._slot.snapshot()

    async def spinup(self) -> None:
        """Start an agent container unless one is already tracked.

        The container identifier is recorded as soon as the container has
        started, before its health is known, so a later ``remove_existing``
        cleans up a container that never became active.

        Raises:
            ExternalToolFailure: If pulling, creating, starting or inspecting failed.
            StartFailed: If the container was not active after the settle window.
                The slot then still tracks it, in the FAILED state.
        """
        async with self._slot.lock:
            if self._slot.container_id is not None:
                logger.debug("Container %s is already tracked, not spinning up", self._slot.container_id)
                return

            logger.info("Spinning up new container")

            await asyncio.to_thread(self.backend.image_pull, image=self.launcher.image)
            spec = await asyncio.to_thread(self.launcher.build)
            container_id = await asyncio.to_thread(self.backend.container_create, spec=spec)

            try:
                if spec.network is not None:
                    logger.info("Connecting container %s to network %s", container_id, spec.network)
                    await asyncio.to_thread(
                        self.backend.network_connect, container_id=container_id, network=spec.network
                    )
                await asyncio.to_thread(self.backend.container_start, container_id=container_id)
            except ExternalToolFailure:
                await self._discard_unstarted(container_id)
                raise

            self._slot.record(SlotState.STARTING, container_id)
            logger.info("Container %s started, checking status in %.0fs", container_id, self.settle_seconds)

            # Allow time to spin up
            await asyncio.sleep(self.settle_seconds)

            try:
                status = await asyncio.to_thread(self.backend.container_status, container_id=container_id)
            except ExternalToolFailure:
                self._slot.record(SlotState.FAILED, container_id)
                raise

            if status is not ContainerStatus.ACTIVE:
                self._slot.record(SlotState.FAILED, container_id)
                raise StartFailed(container_id, status.value)

            self._slot.record(SlotState.ACTIVE, container_id)
            logger.info("Container %s is active", container_id)

    async def remove_existing(self) -> None:
        """Stop and remove the tracked container, if any.

        The slot is cleared before the container engine is called, so it is
        empty afterwards even if stopping or removing fails.

        Raises:
            ExternalToolFailure: If stopping or removing the container failed.
        """
        async with self._slot.lock:
            container_id = self._slot.take()
            if container_id is None:
                return

            logger.warning("Removing existing container %s...", container_id)
            await asyncio.to_thread(self.backend.container_stop, container_id=container_id)
            await asyncio.to_thread(self.backend.container_remove, container_id=container_id)
            logger.info("Container %s removed", container_id)

    async def _discard_unstarted(self, container_id: str) -> None:
        # Created but never started: nothing is tracked, so clean it up here.
        try:
            await asyncio.to_thread(self.backend.container_remove, container_id=container_id)
        except ExternalToolFailure as exc:
            logger.error("Failed to remove unstarted container %s: %s", container_id, exc)


__all__ = ["ContainerSlot", "ContainerSupervisor"]
