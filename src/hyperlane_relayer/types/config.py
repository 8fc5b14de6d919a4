"""Configuration type definitions for the relayer agent."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hyperlane_relayer.errors import InvalidInput

RELAY_CHAIN_SEPARATOR = ","


def validate_relay_chains(relay_chains: str) -> str:
    """Check that a relay-chain list names at least two chains.

    Args:
        relay_chains: Comma-separated chain identifiers, e.g. "ethereum,polygon".

    Returns:
        The relay-chain string, unchanged.

    Raises:
        InvalidInput: If the string is empty, has no separator, or has fewer
            than two non-empty identifiers.
    """
    if not relay_chains or RELAY_CHAIN_SEPARATOR not in relay_chains:
        msg = "`relay_chains` is invalid, ensure it contains at least two chains"
        raise InvalidInput(msg)

    chains = [chain.strip() for chain in relay_chains.split(RELAY_CHAIN_SEPARATOR)]
    if sum(1 for chain in chains if chain) < 2:
        msg = f"`relay_chains` is invalid, expected at least two non-empty chain names, got {relay_chains!r}"
        raise InvalidInput(msg)

    return relay_chains


class ConfigSet(BaseModel):
    """A complete agent configuration: documents plus relay chains.

    Attributes:
        documents: Opaque configuration documents, written in order as 0.json..N-1.json.
        relay_chains: Comma-separated relay-chain list, stored verbatim.
    """

    model_config = ConfigDict(frozen=True)

    documents: tuple[str, ...] = Field(default=(), description="Configuration documents in order")
    relay_chains: str = Field(description="Comma-separated relay-chain list")

    @field_validator("relay_chains")
    @classmethod
    def check_relay_chains(cls, value: str) -> str:
        return validate_relay_chains(value)

    @property
    def chains(self) -> list[str]:
        """Relay-chain identifiers in order."""
        return [chain.strip() for chain in self.relay_chains.split(RELAY_CHAIN_SEPARATOR) if chain.strip()]


class SetConfigRequest(BaseModel):
    """Arguments of the set-config job as received over the wire.

    Relay chains are validated by the coordinator, not here, so a malformed
    value is reported as ``InvalidInput`` like any other caller.
    """

    model_config = ConfigDict(extra="forbid")

    configs: list[str] | None = Field(default=None, description="Config sources (literal, file:// or http(s)://)")
    relay_chains: str = Field(description="Comma-separated relay-chain list")


__all__ = [
    "RELAY_CHAIN_SEPARATOR",
    "ConfigSet",
    "SetConfigRequest",
    "validate_relay_chains",
]
