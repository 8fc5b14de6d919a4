"""Internal utilities for hyperlane_relayer package."""

from __future__ import annotations

from .config import RelayerSettings, get_settings, load_settings
from .logging import configure_logging

__all__ = ["RelayerSettings", "configure_logging", "get_settings", "load_settings"]
