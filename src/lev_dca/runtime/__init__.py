"""Runtime context exports."""

from lev_dca.runtime.context import RunContext, create_run_context

__all__ = [
    "RunContext",
    "create_run_context",
]
