"""
Shell command adapter — run a package-manager command and capture output.

Commands are argument lists (no shell). No timeout is applied: a
package manager that hangs blocks the operation.
"""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
import time
from pathlib import Path

from depsadmin.adapters.base import Adapter, ExecutionContext
from depsadmin.core.models.action import Receipt

logger = logging.getLogger(__name__)


class ShellCommandAdapter(Adapter):
    """Execute package-manager commands with ``subprocess.run``."""

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self, executable: str) -> bool:
        return shutil.which(executable) is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        valid, error = super().validate(context)
        if not valid:
            return valid, error

        if context.cwd and not Path(context.cwd).is_dir():
            return False, f"Working directory does not exist: {context.cwd}"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        logger.debug("Executing: %s (cwd=%s)", shlex.join(context.command), context.cwd or ".")
        start = time.monotonic()
        try:
            completed = subprocess.run(
                context.command,
                cwd=context.cwd,
                capture_output=True,
                text=True,
            )
        except OSError as e:
            return Receipt.failure(
                self.name,
                context.action_id,
                f"Command execution error: {e}",
                command=context.command,
            )

        return Receipt.from_process(
            self.name,
            context.action_id,
            context.command,
            completed,
            duration_ms=int((time.monotonic() - start) * 1000),
        )
