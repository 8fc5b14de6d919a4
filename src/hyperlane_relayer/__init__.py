"""Supervisor for a Hyperlane relayer agent container.

This package runs a single relayer agent in a container and exposes one job,
set-config, which replaces the agent configuration all-or-nothing and restarts
the agent, rolling back to the previous configuration if the new one fails.

Example usage:
    # CLI
    relayer-ctl serve --data-dir /var/lib/relayer
    relayer-ctl set-config -c file:///etc/relayer/agent.json -r ethereum,polygon

    # Python API
    coordinator = ConfigTransactionCoordinator.from_settings(load_settings())
    await coordinator.set_config(None, "ethereum,polygon")
"""

from __future__ import annotations

from ._internal import RelayerSettings, configure_logging, load_settings
from .coordinator import SET_CONFIG_SUCCESS, ConfigTransactionCoordinator, TransactionPhase
from .errors import (
    ConfigSourceError,
    DataDirLocked,
    ExternalToolFailure,
    FilesystemError,
    InvalidInput,
    KeyMaterialError,
    NoFallback,
    RelayerError,
    StartFailed,
)
from .store import ConfigStore

__version__ = "0.1.0"

__all__ = [
    "SET_CONFIG_SUCCESS",
    "ConfigSourceError",
    "ConfigStore",
    "ConfigTransactionCoordinator",
    "DataDirLocked",
    "ExternalToolFailure",
    "FilesystemError",
    "InvalidInput",
    "KeyMaterialError",
    "NoFallback",
    "RelayerError",
    "RelayerSettings",
    "StartFailed",
    "TransactionPhase",
    "configure_logging",
    "load_settings",
]
