"""Pytest configuration for all tests."""

from __future__ import annotations

import shutil
from collections import deque
from pathlib import Path

import pytest

from hyperlane_relayer.container import AgentLauncher, ContainerSupervisor
from hyperlane_relayer.coordinator import ConfigTransactionCoordinator
from hyperlane_relayer.errors import ExternalToolFailure
from hyperlane_relayer.keys import StaticKeyMaterial
from hyperlane_relayer.sources import DefaultSourceResolver
from hyperlane_relayer.store import ConfigStore
from hyperlane_relayer.types.container import ContainerSpec, ContainerStatus

TEST_IMAGE = "hyperlane-agent:test"
TEST_SECRET = "11" * 32


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "docker: marks tests that require Docker")


def pytest_collection_modifyitems(config, items):
    """Skip docker tests when the docker CLI is unavailable."""
    if shutil.which("docker") is not None:
        return
    skip_docker = pytest.mark.skip(reason="'docker' is missing or not available in PATH.")
    for item in items:
        if "docker" in item.keywords:
            item.add_marker(skip_docker)


class FakeBackend:
    """In-memory ContainerBackend that records every call.

    Attributes:
        calls: (operation, argument) tuples in call order.
        specs: Specs passed to container_create, in order.
        statuses: Statuses returned by successive container_status calls.
            ContainerStatus.ACTIVE once exhausted.
        failures: Operation name -> error raised on its next call.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.specs: list[ContainerSpec] = []
        self.statuses: deque[ContainerStatus] = deque()
        self.failures: dict[str, ExternalToolFailure] = {}
        self._created = 0

    def count(self, operation: str) -> int:
        return sum(1 for op, _ in self.calls if op == operation)

    def operations(self) -> list[str]:
        return [op for op, _ in self.calls]

    def fail_next(self, operation: str, message: str = "injected failure") -> None:
        self.failures[operation] = ExternalToolFailure(message, command=["docker", operation], returncode=1)

    def _call(self, operation: str, argument: str) -> None:
        self.calls.append((operation, argument))
        failure = self.failures.pop(operation, None)
        if failure is not None:
            raise failure

    def image_pull(self, *, image: str) -> None:
        self._call("pull", image)

    def container_create(self, *, spec: ContainerSpec) -> str:
        self._call("create", spec.image)
        self.specs.append(spec)
        self._created += 1
        return f"container-{self._created}"

    def container_start(self, *, container_id: str) -> None:
        self._call("start", container_id)

    def container_status(self, *, container_id: str) -> ContainerStatus:
        self._call("status", container_id)
        if self.statuses:
            return self.statuses.popleft()
        return ContainerStatus.ACTIVE

    def container_stop(self, *, container_id: str) -> None:
        self._call("stop", container_id)

    def container_remove(self, *, container_id: str) -> None:
        self._call("remove", container_id)

    def network_connect(self, *, container_id: str, network: str) -> None:
        self._call("network_connect", f"{network}:{container_id}")


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def store(data_dir: Path) -> ConfigStore:
    return ConfigStore(data_dir)


@pytest.fixture
def key_material() -> StaticKeyMaterial:
    return StaticKeyMaterial(TEST_SECRET)


@pytest.fixture
def launcher(store: ConfigStore, key_material: StaticKeyMaterial) -> AgentLauncher:
    return AgentLauncher(store=store, key_material=key_material, image=TEST_IMAGE)


@pytest.fixture
def supervisor(backend: FakeBackend, launcher: AgentLauncher) -> ContainerSupervisor:
    return ContainerSupervisor(backend=backend, launcher=launcher, settle_seconds=0)


@pytest.fixture
def coordinator(store: ConfigStore, supervisor: ContainerSupervisor) -> ConfigTransactionCoordinator:
    return ConfigTransactionCoordinator(store=store, supervisor=supervisor, resolver=DefaultSourceResolver())
