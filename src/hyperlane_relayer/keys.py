"""Operator signing key access.

The supervisor never persists key material. It only reads the key when a
container start specification is built.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from .errors import KeyMaterialError

logger = logging.getLogger(__name__)

ECDSA_SECRET_LENGTH = 32


@runtime_checkable
class KeyMaterial(Protocol):
    """Read-only accessor for the operator's ECDSA signing key."""

    def signing_key(self) -> bytes:
        """Return the raw 32-byte secret key.

        Raises:
            KeyMaterialError: If the key is unavailable or malformed.
        """
        ...


def parse_hex_key(value: str) -> bytes:
    """Decode a hex-encoded secret key, with or without a 0x prefix.

    Raises:
        KeyMaterialError: If the value is not hex or not 32 bytes long.
    """
    text = value.strip()
    if text.startswith(("0x", "0X")):
        text = text[2:]
    try:
        secret = bytes.fromhex(text)
    except ValueError as exc:
        msg = "Signing key is not valid hex"
        raise KeyMaterialError(msg) from exc
    if len(secret) != ECDSA_SECRET_LENGTH:
        msg = f"Signing key must be {ECDSA_SECRET_LENGTH} bytes, got {len(secret)}"
        raise KeyMaterialError(msg)
    return secret


def hex_secret(key_material: KeyMaterial) -> str:
    """Render the signing key as the agent expects it on its command line."""
    return f"0x{key_material.signing_key().hex()}"


class StaticKeyMaterial:
    """Key material held in memory.

    Args:
        secret: Raw secret bytes or a hex string.
    """

    def __init__(self, secret: bytes | str) -> None:
        self._secret = parse_hex_key(secret) if isinstance(secret, str) else secret
        if len(self._secret) != ECDSA_SECRET_LENGTH:
            msg = f"Signing key must be {ECDSA_SECRET_LENGTH} bytes, got {len(self._secret)}"
            raise KeyMaterialError(msg)

    def signing_key(self) -> bytes:
        return self._secret

    def __repr__(self) -> str:
        return "StaticKeyMaterial(<redacted>)"


class FileKeystore:
    """Key material read from a keystore file, or from an explicit hex value.

    The file holds the hex-encoded secret on a single line. It is read on every
    call so a rotated key is picked up by the next container start.

    Args:
        path: Keystore file.
        override: Hex-encoded key taking precedence over the file.
    """

    def __init__(self, path: Path, override: str | None = None) -> None:
        self.path = path
        self._override = override

    def signing_key(self) -> bytes:
        if self._override:
            return parse_hex_key(self._override)

        if not self.path.is_file():
            msg = f"Keystore file not found: {self.path}"
            raise KeyMaterialError(msg)
        try:
            content = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Failed to read keystore file {self.path}: {exc}"
            raise KeyMaterialError(msg) from exc
        logger.debug("Loaded signing key from `%s`", self.path)
        return parse_hex_key(content)

    def __repr__(self) -> str:
        return f"FileKeystore(path={str(self.path)!r})"


__all__ = [
    "ECDSA_SECRET_LENGTH",
    "FileKeystore",
    "KeyMaterial",
    "StaticKeyMaterial",
    "hex_secret",
    "parse_hex_key",
]
