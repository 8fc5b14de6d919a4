"""Error types raised by the relayer supervisor.

Every failure that can reach a job caller derives from ``RelayerError`` so the
server and CLI layers can map them to a response in one place.
"""

from __future__ import annotations


class RelayerError(Exception):
    """Base class for all supervisor errors."""


class InvalidInput(RelayerError, ValueError):  # noqa: N818
    """A job argument was rejected before any state was touched."""


class ConfigSourceError(InvalidInput):
    """A configuration source could not be resolved to document content."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to resolve config source `{source}`: {reason}")


class ExternalToolFailure(RelayerError, RuntimeError):  # noqa: N818
    """A container engine call failed.

    Attributes:
        command: The command that was executed.
        returncode: Exit code of the command, if it ran at all.
        stderr: Error output reported by the command.
    """

    def __init__(
        self,
        message: str,
        *,
        command: list[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        self.command = command or []
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr.strip()}" if stderr.strip() else ""
        super().__init__(f"{message}{detail}")


class StartFailed(RelayerError):  # noqa: N818
    """The agent container did not report active after the settle window."""

    def __init__(self, container_id: str, status: str) -> None:
        self.container_id = container_id
        self.status = status
        super().__init__(f"Failed to start container {container_id} (status: {status}), config error?")


class NoFallback(RelayerError):  # noqa: N818
    """A rollback was requested but no backup configuration exists."""


class FilesystemError(RelayerError, OSError):
    """The configuration store could not read, write or rename a file."""


class KeyMaterialError(RelayerError):
    """The operator signing key is missing or malformed."""


class DataDirLocked(RelayerError):  # noqa: N818
    """Another supervisor process already owns the data directory."""


__all__ = [
    "ConfigSourceError",
    "DataDirLocked",
    "ExternalToolFailure",
    "FilesystemError",
    "InvalidInput",
    "KeyMaterialError",
    "NoFallback",
    "RelayerError",
    "StartFailed",
]
