import subprocess
import uuid

import pytest

from hyperlane_relayer.container.backend import docker as docker_module
from hyperlane_relayer.container.backend.docker import DockerBackend
from hyperlane_relayer.errors import ExternalToolFailure
from hyperlane_relayer.types.container import ContainerSpec, ContainerStatus


class _RecordingRun:
    def __init__(self, stdout: str = "", returncode: int = 0, stderr: str = "") -> None:
        self.stdout = stdout
        self.returncode = returncode
        self.stderr = stderr
        self.commands: list[list[str]] = []

    def __call__(self, cmd, **kwargs):
        self.commands.append(cmd)
        return subprocess.CompletedProcess(cmd, self.returncode, stdout=self.stdout, stderr=self.stderr)


@pytest.fixture
def recording_run(monkeypatch: pytest.MonkeyPatch) -> _RecordingRun:
    run = _RecordingRun()
    monkeypatch.setattr(docker_module.subprocess, "run", run)
    return run


def test_create_builds_docker_command(recording_run: _RecordingRun):
    recording_run.stdout = "abc123\n"
    spec = ContainerSpec(
        image="hyperlane-agent:test",
        binds=("/data/hyperlane_db:/hyperlane_db", "/data/agent_configs:/config:ro"),
        env={"CONFIG_FILES": "/config/0.json", "HYP_RELAYCHAINS": "ethereum,polygon"},
        cmd=("./relayer", "--db", "/hyperlane_db"),
    )

    container_id = DockerBackend().container_create(spec=spec)

    assert container_id == "abc123"
    assert recording_run.commands == [
        [
            "docker",
            "create",
            "-v",
            "/data/hyperlane_db:/hyperlane_db",
            "-v",
            "/data/agent_configs:/config:ro",
            "-e",
            "CONFIG_FILES=/config/0.json",
            "-e",
            "HYP_RELAYCHAINS=ethereum,polygon",
            "hyperlane-agent:test",
            "./relayer",
            "--db",
            "/hyperlane_db",
        ]
    ]


def test_create_failure_does_not_leak_command_line(recording_run: _RecordingRun):
    recording_run.returncode = 1
    recording_run.stderr = "no such image"
    spec = ContainerSpec(image="missing:latest", cmd=("./relayer", "--defaultSigner.key", "0xsecret"))

    with pytest.raises(ExternalToolFailure, match="no such image") as exc_info:
        DockerBackend().container_create(spec=spec)

    assert exc_info.value.command == ["docker", "create"]
    assert exc_info.value.returncode == 1


def test_create_without_id_raises(recording_run: _RecordingRun):
    with pytest.raises(ExternalToolFailure, match="no container id"):
        DockerBackend().container_create(spec=ContainerSpec(image="agent:test"))


@pytest.mark.parametrize(
    ("stdout", "expected"),
    [("true\n", ContainerStatus.ACTIVE), ("false\n", ContainerStatus.INACTIVE)],
)
def test_status_reads_running_flag(recording_run: _RecordingRun, stdout: str, expected: ContainerStatus):
    recording_run.stdout = stdout

    assert DockerBackend().container_status(container_id="abc") is expected
    assert recording_run.commands[0] == ["docker", "inspect", "--format", "{{.State.Running}}", "abc"]


def test_lifecycle_commands(recording_run: _RecordingRun):
    backend = DockerBackend(docker="/usr/bin/docker")

    backend.image_pull(image="agent:test")
    backend.container_start(container_id="abc")
    backend.network_connect(container_id="abc", network="test_net")
    backend.container_stop(container_id="abc")
    backend.container_remove(container_id="abc")

    assert recording_run.commands == [
        ["/usr/bin/docker", "pull", "agent:test"],
        ["/usr/bin/docker", "start", "abc"],
        ["/usr/bin/docker", "network", "connect", "test_net", "abc"],
        ["/usr/bin/docker", "stop", "abc"],
        ["/usr/bin/docker", "rm", "abc"],
    ]


def test_nonzero_exit_raises(recording_run: _RecordingRun):
    recording_run.returncode = 1
    recording_run.stderr = "Error: No such container: abc"

    with pytest.raises(ExternalToolFailure, match="Failed to stop container abc: Error: No such container"):
        DockerBackend().container_stop(container_id="abc")


def test_missing_docker_executable_raises():
    backend = DockerBackend(docker=f"docker-missing-{uuid.uuid4().hex}")

    with pytest.raises(ExternalToolFailure, match="Docker command not found"):
        backend.image_pull(image="agent:test")


def test_timeout_raises(monkeypatch: pytest.MonkeyPatch):
    def slow_run(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

    monkeypatch.setattr(docker_module.subprocess, "run", slow_run)

    with pytest.raises(ExternalToolFailure, match="timed out after 5s"):
        DockerBackend(timeout=5).container_start(container_id="abc")


@pytest.mark.docker
def test_status_of_unknown_container_raises():
    with pytest.raises(ExternalToolFailure, match="Failed to get status"):
        DockerBackend().container_status(container_id=f"missing-{uuid.uuid4().hex}")
