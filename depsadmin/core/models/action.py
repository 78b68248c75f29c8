"""
Receipt model — the outcome of one package-manager invocation.

Adapters return receipts and never raise: a non-zero exit status, a
missing executable at spawn time, or a rejected command all end up
here with status='failed'.
"""

from __future__ import annotations

import shlex
import subprocess
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class Receipt(BaseModel):
    """What happened when one command line was handed to an adapter."""

    adapter: str
    action_id: str                  # runtime, dev, global, uninstall
    status: Literal["ok", "failed"] = "ok"

    command: list[str] = Field(default_factory=list)
    return_code: int | None = None
    stdout: str = ""
    stderr: str = ""
    error: str | None = None

    duration_ms: int = 0
    finished_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def command_line(self) -> str:
        return shlex.join(self.command)

    @classmethod
    def success(cls, adapter: str, action_id: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="ok", **kwargs)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="failed", error=error, **kwargs)

    @classmethod
    def from_process(
        cls,
        adapter: str,
        action_id: str,
        command: list[str],
        completed: subprocess.CompletedProcess,
        *,
        duration_ms: int = 0,
    ) -> Receipt:
        """Build a receipt from a finished process.

        Exit code 0 is success. Otherwise stderr becomes the error, or
        a generic exit-code message when the process printed nothing.
        """
        stdout = (completed.stdout or "").strip()
        stderr = (completed.stderr or "").strip()
        fields = dict(
            command=list(command),
            return_code=completed.returncode,
            stdout=stdout,
            stderr=stderr,
            duration_ms=duration_ms,
        )
        if completed.returncode == 0:
            return cls.success(adapter, action_id, **fields)
        error = stderr or f"Command exited with code {completed.returncode}"
        return cls.failure(adapter, action_id, error, **fields)
