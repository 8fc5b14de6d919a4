"""Settings for the relayer supervisor.

Values are read from ``HYPERLANE_RELAYER_*`` environment variables and can be
overridden per field by keyword arguments.

Example environment variables:
    HYPERLANE_RELAYER_DATA_DIR=/var/lib/hyperlane-relayer
    HYPERLANE_RELAYER_TEST_NETWORK=hyperlane_relayer_test_net
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_IMAGE = "gcr.io/abacus-labs-dev/hyperlane-agent:main"
DEFAULT_SETTLE_SECONDS = 20.0


class RelayerSettings(BaseSettings):
    """Runtime settings for the relayer supervisor."""

    model_config = SettingsConfigDict(env_prefix="HYPERLANE_RELAYER_", extra="ignore")

    data_dir: Path = Path("data")
    """Directory holding agent storage, current configs and their backup."""

    image: str = DEFAULT_IMAGE
    """Agent image, pulled before every spin-up."""

    settle_seconds: float = Field(default=DEFAULT_SETTLE_SECONDS, ge=0)
    """Delay between starting the container and its single status check."""

    test_network: str | None = None
    """Internal network to attach the agent to. Setting it enables test mode."""

    keystore_path: Path | None = None
    """File holding the hex-encoded ECDSA signing key. Defaults to <data_dir>/keystore/ecdsa.key."""

    signer_key: str | None = Field(default=None, repr=False)
    """Hex-encoded signing key. Takes precedence over keystore_path."""

    host: str = "127.0.0.1"
    """Interface the job endpoint binds to."""

    port: int = 8878
    """Port the job endpoint listens on."""

    source_timeout: float = Field(default=30.0, gt=0)
    """Timeout in seconds for fetching http(s):// config sources."""

    @property
    def resolved_keystore_path(self) -> Path:
        """Keystore file, falling back to the data directory default."""
        if self.keystore_path is not None:
            return self.keystore_path
        return self.data_dir / "keystore" / "ecdsa.key"


def load_settings(**overrides: Any) -> RelayerSettings:
    """Build settings from the environment plus explicit overrides.

    Args:
        **overrides: Field values taking precedence over the environment. ``None``
            values are ignored so CLI flags can be passed through unconditionally.

    Raises:
        RuntimeError: If the resulting settings are invalid.
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return RelayerSettings(**values)
    except ValidationError as exc:
        raise RuntimeError(f"Invalid relayer settings: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings() -> RelayerSettings:
    """Load and cache settings from the environment."""
    return load_settings()


__all__ = ["DEFAULT_IMAGE", "DEFAULT_SETTLE_SECONDS", "RelayerSettings", "get_settings", "load_settings"]
