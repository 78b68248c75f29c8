"""
Backend detection — which package manager governs a package root.

Resolution order:
    1. ``packageManager`` field of the manifest (corepack style, e.g. "pnpm@9.1.0")
    2. Lock files, checked in the order npm, yarn, pnpm, bun
    3. npm
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from depsadmin.core.services.commands import _BACKENDS, DEFAULT_BACKEND

logger = logging.getLogger(__name__)


def is_backend_installed(backend: str) -> bool:
    """Whether the backend's executable is on PATH."""
    spec = _BACKENDS.get(backend)
    if spec is None:
        return False
    return shutil.which(spec["cli"]) is not None


def backend_from_manifest(manifest: dict) -> str | None:
    """Backend named by the manifest's ``packageManager`` field, if supported."""
    value = manifest.get("packageManager")
    if not isinstance(value, str) or not value:
        return None
    name = value.split("@", 1)[0].strip().lower()
    return name if name in _BACKENDS else None


def backend_from_lock_files(root: Path) -> str | None:
    """First backend whose lock file exists in ``root``."""
    root = Path(root)
    for backend, spec in _BACKENDS.items():
        for lock_file in spec["lock_files"]:
            if (root / lock_file).is_file():
                return backend
    return None


def detect_backend(root: Path, manifest: dict | None = None) -> str:
    """Infer the backend for a package root (defaults to npm)."""
    if manifest:
        backend = backend_from_manifest(manifest)
        if backend:
            logger.debug("Backend %s from packageManager field", backend)
            return backend

    backend = backend_from_lock_files(root)
    if backend:
        logger.debug("Backend %s from lock file in %s", backend, root)
        return backend

    return DEFAULT_BACKEND


def lock_files_present(root: Path) -> list[str]:
    """All recognized lock files in ``root``."""
    root = Path(root)
    return [
        lock_file
        for spec in _BACKENDS.values()
        for lock_file in spec["lock_files"]
        if (root / lock_file).is_file()
    ]
