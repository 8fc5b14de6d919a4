"""The set-config job: transactional replacement of the agent configuration.

A transaction removes the running agent, moves the current configuration aside,
writes the new one and starts a fresh agent. If the agent does not come up,
the previous configuration is restored and the agent is started again from it.
"""

from __future__ import annotations

import asyncio
import logging
from enum import StrEnum
from typing import TYPE_CHECKING

from .container import AgentLauncher, ContainerSupervisor, get_default_backend
from .errors import ExternalToolFailure, InvalidInput, NoFallback, StartFailed
from .keys import FileKeystore
from .sources import DefaultSourceResolver
from .store import ConfigStore
from .types.config import ConfigSet, validate_relay_chains

if TYPE_CHECKING:
    from ._internal.config import RelayerSettings
    from .container import ContainerBackend
    from .keys import KeyMaterial
    from .sources import SourceResolver

logger = logging.getLogger(__name__)

SET_CONFIG_JOB_ID = 0
"""Job identifier of set-config on the job-invocation side."""

SET_CONFIG_SUCCESS = 0
"""Status code returned by a committed set-config transaction."""


class TransactionPhase(StrEnum):
    """Where the most recent set-config transaction is, or ended."""

    IDLE = "idle"
    VALIDATING = "validating"
    REMOVING_OLD = "removing_old"
    STAGING = "staging"
    WRITING = "writing"
    STARTING = "starting"
    COMMITTED = "committed"
    ROLLING_BACK = "rolling_back"
    RESTARTING = "restarting"
    ABORTED = "aborted"
    FATAL = "fatal"


class ConfigTransactionCoordinator:
    """Runs set-config transactions one at a time.

    The coordinator's lock covers the whole transaction, both the configuration
    files and the container, so concurrent callers cannot interleave their writes.

    Args:
        store: Configuration store.
        supervisor: Supervisor of the agent container.
        resolver: Resolves config sources to document content.
    """

    def __init__(
        self,
        *,
        store: ConfigStore,
        supervisor: ContainerSupervisor,
        resolver: SourceResolver,
    ) -> None:
        self.store = store
        self.supervisor = supervisor
        self.resolver = resolver
        self.phase = TransactionPhase.IDLE
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(
        cls,
        settings: RelayerSettings,
        *,
        backend: ContainerBackend | None = None,
        key_material: KeyMaterial | None = None,
        resolver: SourceResolver | None = None,
    ) -> ConfigTransactionCoordinator:
        """Wire a coordinator from settings, with optional collaborator overrides."""
        store = ConfigStore(settings.data_dir)
        if key_material is None:
            key_material = FileKeystore(settings.resolved_keystore_path, override=settings.signer_key)
        launcher = AgentLauncher(
            store=store,
            key_material=key_material,
            image=settings.image,
            network=settings.test_network,
        )
        supervisor = ContainerSupervisor(
            backend=backend or get_default_backend(),
            launcher=launcher,
            settle_seconds=settings.settle_seconds,
        )
        return cls(
            store=store,
            supervisor=supervisor,
            resolver=resolver or DefaultSourceResolver(timeout=settings.source_timeout),
        )

    async def set_config(self, configs: list[str] | None, relay_chains: str) -> int:
        """Replace the agent configuration and restart the agent.

        Args:
            configs: Config sources, each a literal document, a file:// URI or an
                http(s):// URL. None or empty means the agent's defaults.
            relay_chains: Comma-separated relay chains, at least two.

        Returns:
            SET_CONFIG_SUCCESS once the new configuration, or the restored
            previous one, is running.

        Raises:
            InvalidInput: If relay_chains is malformed, a source cannot be
                resolved, or a document is not UTF-8 encodable. Nothing has
                been changed.
            FilesystemError: If the configuration files could not be updated.
                No rollback is attempted.
            NoFallback: If the new configuration failed and there was no
                previous configuration to restore.
            StartFailed, ExternalToolFailure: If the agent could not be started,
                either outright or after restoring the previous configuration.
        """
        async with self._lock:
            try:
                return await self._run(configs, relay_chains)
            except Exception:
                if self.phase is not TransactionPhase.FATAL:
                    self.phase = TransactionPhase.ABORTED
                raise

    async def shutdown(self) -> None:
        """Remove the agent container, waiting for any running transaction."""
        async with self._lock:
            logger.info("Shutting down...")
            await self.supervisor.remove_existing()

    async def _run(self, configs: list[str] | None, relay_chains: str) -> int:
        self._enter(TransactionPhase.VALIDATING)
        config = await asyncio.to_thread(self._prepare, configs, relay_chains)
        logger.info("Applying %d config document(s) for chains: %s", len(config.documents), ", ".join(config.chains))

        self._enter(TransactionPhase.REMOVING_OLD)
        await self.supervisor.remove_existing()

        self._enter(TransactionPhase.STAGING)
        await asyncio.to_thread(self.store.stage)

        self._enter(TransactionPhase.WRITING)
        await asyncio.to_thread(self.store.write_documents, config.documents)
        await asyncio.to_thread(self.store.write_relay_chains, config.relay_chains)

        self._enter(TransactionPhase.STARTING)
        try:
            await self.supervisor.spinup()
        except (StartFailed, ExternalToolFailure) as exc:
            # Something went wrong spinning up the container, possibly bad config.
            logger.error("Container failed to start with new configs, reverting: %s", exc)
            await self._revert()

        self._enter(TransactionPhase.COMMITTED)
        return SET_CONFIG_SUCCESS

    async def _revert(self) -> None:
        self._enter(TransactionPhase.ROLLING_BACK)
        await self.supervisor.remove_existing()
        try:
            await asyncio.to_thread(self.store.rollback)
        except NoFallback:
            self._enter(TransactionPhase.FATAL)
            raise

        self._enter(TransactionPhase.RESTARTING)
        try:
            await self.supervisor.spinup()
        except (StartFailed, ExternalToolFailure):
            self._enter(TransactionPhase.FATAL)
            raise
        logger.info("Previous configuration restored and running")

    def _prepare(self, configs: list[str] | None, relay_chains: str) -> ConfigSet:
        # Everything that can reject the request runs here, before any mutation.
        validate_relay_chains(relay_chains)
        _check_encodable("relay_chains", relay_chains)
        documents = []
        for index, source in enumerate(configs or []):
            document = self.resolver.resolve(source)
            _check_encodable(f"config document {index}", document)
            documents.append(document)
        return ConfigSet(documents=tuple(documents), relay_chains=relay_chains)

    def _enter(self, phase: TransactionPhase) -> None:
        logger.debug("set-config: %s -> %s", self.phase.value, phase.value)
        self.phase = phase


def _check_encodable(name: str, value: str) -> None:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        msg = f"{name} is not valid UTF-8 text: {exc.reason}"
        raise InvalidInput(msg) from exc


__all__ = [
    "SET_CONFIG_JOB_ID",
    "SET_CONFIG_SUCCESS",
    "ConfigTransactionCoordinator",
    "TransactionPhase",
]
