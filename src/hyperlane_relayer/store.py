"""Filesystem-backed storage for the agent configuration.

Layout under the data directory::

    hyperlane_db/             persistent agent storage
    agent_configs/N.json      current configuration documents
    agent_configs.orig/       backup documents (transient)
    relay_chains.txt          current relay-chain list
    relay_chains.txt.orig     backup relay-chain list (transient)

The store keeps at most one backup. ``stage`` moves the current configuration
aside, ``rollback`` moves it back.
"""

from __future__ import annotations

import logging
import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from filelock import FileLock, Timeout

from .errors import DataDirLocked, FilesystemError, NoFallback

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

logger = logging.getLogger(__name__)

HYPERLANE_DB_DIR = "hyperlane_db"
AGENT_CONFIGS_DIR = "agent_configs"
RELAY_CHAINS_FILE = "relay_chains.txt"
BACKUP_SUFFIX = ".orig"
LOCK_FILE = ".relayer.lock"


class ConfigStore:
    """Current agent configuration plus at most one backup, on disk.

    Args:
        data_dir: Directory holding the agent configuration and storage.

    Example:
        >>> store = ConfigStore(Path("/var/lib/relayer"))
        >>> store.stage()
        >>> store.write_documents(['{"chains": {}}'])
        >>> store.write_relay_chains("ethereum,polygon")
    """

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = data_dir

    @property
    def hyperlane_db_path(self) -> Path:
        return self.data_dir / HYPERLANE_DB_DIR

    @property
    def configs_path(self) -> Path:
        return self.data_dir / AGENT_CONFIGS_DIR

    @property
    def relay_chains_path(self) -> Path:
        return self.data_dir / RELAY_CHAINS_FILE

    @property
    def backup_configs_path(self) -> Path:
        return self.data_dir / f"{AGENT_CONFIGS_DIR}{BACKUP_SUFFIX}"

    @property
    def backup_relay_chains_path(self) -> Path:
        return self.data_dir / f"{RELAY_CHAINS_FILE}{BACKUP_SUFFIX}"

    @property
    def has_backup(self) -> bool:
        """True if a backup of the documents directory exists."""
        return self.backup_configs_path.is_dir()

    def ensure_data_dir(self) -> None:
        """Create the data directory if it is missing."""
        if self.data_dir.exists():
            return
        logger.warning("Data dir `%s` does not exist, creating", self.data_dir)
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            msg = f"Failed to create data dir {self.data_dir}: {exc}"
            raise FilesystemError(msg) from exc

    def ensure_hyperlane_db(self) -> Path:
        """Create the agent's persistent storage directory if it is missing.

        Returns:
            Path to the storage directory.
        """
        path = self.hyperlane_db_path
        if not path.exists():
            logger.warning("Hyperlane DB does not exist, creating...")
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                msg = f"Failed to create Hyperlane DB at {path}: {exc}"
                raise FilesystemError(msg) from exc
            logger.info("Hyperlane DB created at `%s`", path)
        return path

    # --- Transaction steps ---

    def stage(self) -> None:
        """Move the current configuration aside as the backup.

        An earlier backup is only replaced by a current artifact being moved
        onto it, so a backup left by an interrupted stage survives the next
        one. A fresh, empty documents directory is created afterwards.

        Raises:
            FilesystemError: On any I/O failure. The store may then be partially
                staged and the caller must not mutate it further.
        """
        try:
            if self.configs_path.exists():
                if self.backup_configs_path.exists():
                    logger.debug("Discarding previous backup `%s`", self.backup_configs_path)
                    shutil.rmtree(self.backup_configs_path)
                logger.info("Configs path exists, moving it to `%s`", self.backup_configs_path)
                self.configs_path.rename(self.backup_configs_path)

            if self.relay_chains_path.exists():
                logger.info("Relay chains list exists, moving it to `%s`", self.backup_relay_chains_path)
                self.relay_chains_path.replace(self.backup_relay_chains_path)

            self.configs_path.mkdir(parents=True)
        except OSError as exc:
            msg = f"Failed to stage configuration in {self.data_dir}: {exc}"
            raise FilesystemError(msg) from exc

    def write_documents(self, documents: Sequence[str]) -> list[Path]:
        """Write documents as 0.json..N-1.json into the documents directory.

        An empty sequence leaves the directory empty so the agent uses its
        built-in defaults.

        Returns:
            Paths of the written files, in order.

        Raises:
            FilesystemError: On any I/O failure.
        """
        written: list[Path] = []
        try:
            self.configs_path.mkdir(parents=True, exist_ok=True)
            for index, document in enumerate(documents):
                path = self.configs_path / f"{index}.json"
                path.write_bytes(document.encode("utf-8"))
                written.append(path)
        except OSError as exc:
            msg = f"Failed to write configs to {self.configs_path}: {exc}"
            raise FilesystemError(msg) from exc

        if written:
            logger.info("New configs written to: %s", self.configs_path)
        else:
            logger.info("No configs provided, using defaults")
        return written

    def write_relay_chains(self, relay_chains: str) -> None:
        """Write the relay-chain list verbatim.

        Raises:
            FilesystemError: On any I/O failure.
        """
        try:
            self.relay_chains_path.write_bytes(relay_chains.encode("utf-8"))
        except OSError as exc:
            msg = f"Failed to write relay chains to {self.relay_chains_path}: {exc}"
            raise FilesystemError(msg) from exc
        logger.info("Relay chains written to: %s", self.relay_chains_path)

    def rollback(self) -> None:
        """Restore the backup over the current configuration.

        Raises:
            NoFallback: If there is no backup documents directory.
            FilesystemError: On any I/O failure while restoring.
        """
        if not self.has_backup:
            msg = "Configs failed to apply, with no fallback"
            raise NoFallback(msg)

        try:
            if self.configs_path.exists():
                shutil.rmtree(self.configs_path)
            logger.debug("Moving `%s` to `%s`", self.backup_configs_path, self.configs_path)
            self.backup_configs_path.rename(self.configs_path)

            if self.backup_relay_chains_path.exists():
                logger.debug("Moving `%s` to `%s`", self.backup_relay_chains_path, self.relay_chains_path)
                self.backup_relay_chains_path.replace(self.relay_chains_path)
        except OSError as exc:
            msg = f"Failed to restore configuration backup in {self.data_dir}: {exc}"
            raise FilesystemError(msg) from exc

    # --- Reads ---

    def document_paths(self) -> list[Path]:
        """Current document files in numeric order (empty if none)."""
        if not self.configs_path.is_dir():
            return []
        files = [path for path in self.configs_path.iterdir() if path.is_file()]
        return sorted(files, key=_document_sort_key)

    def read_relay_chains(self) -> str | None:
        """Current relay-chain list, or None if it was never written."""
        if not self.relay_chains_path.exists():
            return None
        try:
            return self.relay_chains_path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Failed to read {self.relay_chains_path}: {exc}"
            raise FilesystemError(msg) from exc


def _document_sort_key(path: Path) -> tuple[int, int | str]:
    # Numbered documents first, in numeric order (10.json after 9.json).
    if path.stem.isdigit():
        return (0, int(path.stem))
    return (1, path.name)


@contextmanager
def data_dir_lock(data_dir: Path, timeout_seconds: float = 0) -> Iterator[None]:
    """Hold the data directory for the lifetime of one supervisor process.

    Args:
        data_dir: Data directory to guard.
        timeout_seconds: Max time to wait for the lock. 0 fails immediately.

    Raises:
        DataDirLocked: If another process holds the lock.
    """
    lock = FileLock(str(data_dir / LOCK_FILE), timeout=timeout_seconds, thread_local=False)
    try:
        lock.acquire()
    except Timeout as exc:
        msg = f"Data dir {data_dir} is already in use by another relayer supervisor"
        raise DataDirLocked(msg) from exc
    try:
        yield
    finally:
        lock.release()


__all__ = [
    "AGENT_CONFIGS_DIR",
    "HYPERLANE_DB_DIR",
    "RELAY_CHAINS_FILE",
    "ConfigStore",
    "data_dir_lock",
]
