"""Construction of the agent container start specification."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from hyperlane_relayer.keys import hex_secret
from hyperlane_relayer.types.container import ContainerSpec

if TYPE_CHECKING:
    from hyperlane_relayer.keys import KeyMaterial
    from hyperlane_relayer.store import ConfigStore

logger = logging.getLogger(__name__)

AGENT_BINARY = "./relayer"
AGENT_DB_MOUNT = "/hyperlane_db"
AGENT_CONFIG_MOUNT = "/config"
CONFIG_FILES_ENV = "CONFIG_FILES"
RELAY_CHAINS_ENV = "HYP_RELAYCHAINS"


class AgentLauncher:
    """Builds the relayer container spec from the current stored configuration.

    Args:
        store: Configuration store to read documents and relay chains from.
        key_material: Source of the operator signing key.
        image: Agent image.
        network: Internal network to attach in test mode, or None.
    """

    def __init__(
        self,
        *,
        store: ConfigStore,
        key_material: KeyMaterial,
        image: str,
        network: str | None = None,
    ) -> None:
        self.store = store
        self.key_material = key_material
        self.image = image
        self.network = network

    def build(self) -> ContainerSpec:
        """Build the start specification for one agent container.

        Raises:
            FilesystemError: If the storage directory cannot be created or the
                relay-chain list cannot be read.
            KeyMaterialError: If the signing key is unavailable.
        """
        db_path = self.store.ensure_hyperlane_db()
        binds = [f"{db_path.resolve()}:{AGENT_DB_MOUNT}"]
        env: dict[str, str] = {}

        documents = self.store.document_paths()
        if documents:
            binds.append(f"{self.store.configs_path.resolve()}:{AGENT_CONFIG_MOUNT}:ro")
            env[CONFIG_FILES_ENV] = ",".join(f"{AGENT_CONFIG_MOUNT}/{path.name}" for path in documents)

        relay_chains = self.store.read_relay_chains()
        if relay_chains is not None:
            env[RELAY_CHAINS_ENV] = relay_chains

        cmd = (
            AGENT_BINARY,
            "--db",
            AGENT_DB_MOUNT,
            "--defaultSigner.key",
            hex_secret(self.key_material),
        )

        logger.debug("Built agent spec with %d config file(s), relay chains: %s", len(documents), relay_chains)
        return ContainerSpec(image=self.image, binds=tuple(binds), env=env, cmd=cmd, network=self.network)


__all__ = ["AgentLauncher"]
