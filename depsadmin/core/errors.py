"""
Error taxonomy for dependency administration.

Validation failures (root, backend, config) are raised and abort the
operation before any process is spawned. Execution failures are never
raised: they live in receipts and reports so batch operations can
complete partially.
"""

from __future__ import annotations

from pathlib import Path


class DepsAdminError(Exception):
    """Base exception for all package-deps-admin errors."""


class RootNotFound(DepsAdminError):
    """Package root is missing, not a directory, or has no manifest."""

    def __init__(self, root: Path | str, reason: str = "") -> None:
        self.root = Path(root)
        self.reason = reason or "package root dir not found"
        super().__init__(f"{self.reason} - {self.root}")


class ManifestNotFound(DepsAdminError):
    """No readable package.json at the expected location."""

    def __init__(self, path: Path | str, reason: str = "") -> None:
        self.path = Path(path)
        self.reason = reason or "File not found"
        super().__init__(f"{self.reason} - {self.path}")


class BackendUnavailable(DepsAdminError):
    """The resolved package manager is unknown or not on PATH."""

    def __init__(self, backend: str, reason: str = "") -> None:
        self.backend = backend
        super().__init__(
            reason
            or (
                f'It seems package manager "{backend}" is not installed. '
                "Install it and try again, or choose another package manager that is installed."
            )
        )


class ConfigError(DepsAdminError):
    """Raised when depsadmin.yml is invalid."""


class StoreReadFailure(DepsAdminError):
    """A persisted store value could not be read.

    Never propagated out of the store; handed to its read-error hook.
    """

    def __init__(self, path: Path | str, detail: str) -> None:
        self.path = Path(path)
        self.detail = detail
        super().__init__(f"Cannot read store {self.path}: {detail}")
