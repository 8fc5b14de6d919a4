"""Job endpoint for the relayer supervisor."""

from .app import JobRunner, create_server, run_server

__all__ = ["JobRunner", "create_server", "run_server"]
