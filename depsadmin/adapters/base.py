"""
Adapter base — the contract between the orchestrators and processes.

The orchestrators never call ``subprocess`` themselves: they hand an
``ExecutionContext`` to an adapter and get a ``Receipt`` back. Swapping
the adapter (shell vs. mock) is how tests and ``--mock`` mode run the
whole engine without a package manager.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from depsadmin.core.models.action import Receipt


class ExecutionContext(BaseModel):
    """Everything an adapter needs to run one command."""

    action_id: str                    # runtime, dev, global, uninstall
    command: list[str] = Field(default_factory=list)
    cwd: str | None = None            # None = inherit (global installs)

    @property
    def executable(self) -> str:
        return self.command[0] if self.command else ""


class Adapter(ABC):
    """Abstract base class for command adapters.

    Adapters perform external side effects and return receipts.
    They NEVER raise: failures are captured in the Receipt.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'shell', 'mock')."""

    @abstractmethod
    def is_available(self, executable: str) -> bool:
        """Check whether ``executable`` can be run by this adapter.

        Should be fast and never raise.
        """

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Validate that the command can be executed.

        Returns:
            (is_valid, error_message). error_message is empty if valid.
        """
        if not context.command:
            return False, "Empty command"
        return True, ""

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Run the command and return a receipt.

        MUST never raise exceptions. All failures are captured
        in the Receipt with status='failed'.
        """

    def run(self, context: ExecutionContext) -> Receipt:
        """Validate, then execute."""
        valid, error = self.validate(context)
        if not valid:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action_id,
                error=f"Validation failed: {error}",
                command=context.command,
            )
        return self.execute(context)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
