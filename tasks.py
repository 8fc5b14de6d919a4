"""Main invoke tasks file. Use `inv --list` to see available tasks."""

from __future__ import annotations

from invoke import Collection, Context, task

TEST_NETWORK = "hyperlane_relayer_test_net"


@task(name="lint")
def lint(ctx: Context) -> None:
    """Run linting (no fixes) - for CI."""
    ctx.run("ruff check")
    ctx.run("ruff format --check")


@task(name="format")
def format_code(ctx: Context) -> None:
    """Format code using ruff - for local dev."""
    ctx.run("ruff check src tests tasks.py --fix")
    ctx.run("ruff format src tests tasks.py")


@task(
    name="test",
    help={
        "docker": "Also run tests that need a local Docker engine",
        "k": "Only run tests matching this expression",
    },
)
def run_tests(ctx: Context, docker: bool = False, k: str | None = None) -> None:
    """Run tests."""
    args = [] if docker else ["-m", "'not docker'"]
    if k:
        args.extend(["-k", f"'{k}'"])
    ctx.run(f"pytest {' '.join(args)}".strip(), pty=True)


@task(name="up")
def network_up(ctx: Context, name: str = TEST_NETWORK) -> None:
    """Create the internal network the agent joins in test mode."""
    result = ctx.run(f"docker network inspect {name}", hide=True, warn=True)
    if result is not None and result.ok:
        print(f"Network {name} already exists")
        return
    ctx.run(f"docker network create --internal {name}")


@task(name="down")
def network_down(ctx: Context, name: str = TEST_NETWORK) -> None:
    """Remove the test-mode network."""
    ctx.run(f"docker network rm {name}", warn=True)


network_ns = Collection("network")
network_ns.add_task(network_up)
network_ns.add_task(network_down)

ns = Collection()
ns.add_task(lint)
ns.add_task(format_code)
ns.add_task(run_tests)
ns.add_collection(network_ns)
