"""Type definitions for the Hyperlane relayer supervisor."""

from .config import RELAY_CHAIN_SEPARATOR, ConfigSet, SetConfigRequest, validate_relay_chains
from .container import ContainerSpec, ContainerStatus, SlotSnapshot, SlotState

__all__ = [
    "RELAY_CHAIN_SEPARATOR",
    "ConfigSet",
    "ContainerSpec",
    "ContainerStatus",
    "SetConfigRequest",
    "SlotSnapshot",
    "SlotState",
    "validate_relay_chains",
]
