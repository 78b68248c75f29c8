"""Adapters — process bindings for package-manager executables.

Public re-exports for convenient access.
"""

from depsadmin.adapters.base import Adapter, ExecutionContext
from depsadmin.adapters.mock import MockAdapter
from depsadmin.adapters.shell.command import ShellCommandAdapter

__all__ = [
    "Adapter",
    "ExecutionContext",
    "MockAdapter",
    "ShellCommandAdapter",
]
