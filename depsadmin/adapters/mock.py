"""
Mock adapter — records package-manager commands instead of running them.

Backs ``depsadmin --mock`` and the test-suite. Every command "exits" 0
unless a failure was registered for its action id (runtime, dev,
global, uninstall) with ``set_failure``.
"""

from __future__ import annotations

import subprocess

from depsadmin.adapters.base import Adapter, ExecutionContext
from depsadmin.core.models.action import Receipt


class MockAdapter(Adapter):
    """In-memory adapter that fakes process results."""

    def __init__(self, adapter_name: str = "mock", available: bool = True):
        self._name = adapter_name
        self._available = available
        self._failures: dict[str, tuple[int, str]] = {}
        self.call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_count(self) -> int:
        return len(self.call_log)

    @property
    def commands(self) -> list[list[str]]:
        """Command lines received, in call order."""
        return [ctx.command for ctx in self.call_log]

    def is_available(self, executable: str) -> bool:
        return self._available

    def set_failure(self, action_id: str, error: str = "Mock failure", return_code: int = 1) -> None:
        """Make every later command with ``action_id`` exit with ``return_code``."""
        self._failures[action_id] = (return_code, error)

    def execute(self, context: ExecutionContext) -> Receipt:
        self.call_log.append(context)
        return_code, stderr = self._failures.get(
            context.action_id, (0, ""),
        )
        stdout = "" if return_code else f"[mock] {' '.join(context.command)}"
        completed = subprocess.CompletedProcess(context.command, return_code, stdout, stderr)
        return Receipt.from_process(self._name, context.action_id, context.command, completed)

    def reset(self) -> None:
        """Forget recorded calls and registered failures."""
        self.call_log.clear()
        self._failures.clear()
