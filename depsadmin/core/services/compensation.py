"""
Compensating actions — what to do when an install step fails.

A caller attaches one ``CompensatingAction`` to each install
instruction. The orchestrator calls ``run_compensation`` only when that
category's command fails; the result is recorded, and an error raised
by the compensation itself is captured rather than propagated.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


class CompensatingAction(ABC):
    """An operation that reverses the partial effects of a failed step."""

    description: str = ""

    @abstractmethod
    def compensate(self) -> Any:
        """Perform the compensation. May raise."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.description!r}>"


class NoCompensation(CompensatingAction):
    """Nothing to undo."""

    description = "no-op"

    def compensate(self) -> None:
        return None


class CallbackCompensation(CompensatingAction):
    """Wrap a plain callable as a compensating action."""

    def __init__(self, fn: Callable[[], Any], description: str = "") -> None:
        self._fn = fn
        self.description = description or getattr(fn, "__name__", "callback")

    def compensate(self) -> Any:
        return self._fn()


@dataclass
class CompensationResult:
    """Outcome of running a compensating action."""

    description: str = ""
    ok: bool = True
    error: str | None = None

    def to_dict(self) -> dict:
        return {"description": self.description, "ok": self.ok, "error": self.error}


def run_compensation(action: CompensatingAction | None, context: str = "") -> CompensationResult:
    """Run ``action``, capturing any exception it raises.

    Args:
        action: The compensating action (None is treated as a no-op).
        context: Label for log messages (e.g. the failed category).
    """
    action = action or NoCompensation()
    result = CompensationResult(description=action.description)

    try:
        action.compensate()
    except Exception as e:  # compensation must never abort sibling categories
        logger.error("Compensation %r for %s failed: %s", action.description, context, e)
        result.ok = False
        result.error = str(e)
        return result

    if not isinstance(action, NoCompensation):
        logger.info("Compensation %r for %s completed", action.description, context)
    return result
