"""
Manifest access — read-only view of ``<root>/package.json``.

This module never writes the manifest. It changes only as a side
effect of the package-manager commands.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from depsadmin.core.errors import ManifestNotFound, RootNotFound

logger = logging.getLogger(__name__)

MANIFEST_FILE = "package.json"


def manifest_path(root: Path) -> Path:
    return Path(root) / MANIFEST_FILE


def read_manifest(root: Path) -> dict:
    """Load the manifest of the package at ``root``.

    Raises:
        ManifestNotFound: If the file is missing, unreadable, not JSON,
            or not a JSON object.
    """
    path = manifest_path(root)
    if not path.is_file():
        raise ManifestNotFound(path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestNotFound(path, f"Cannot read manifest ({e})") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ManifestNotFound(path, f"Invalid JSON in manifest ({e})") from e

    if not isinstance(data, dict):
        raise ManifestNotFound(path, f"Expected a JSON object, got {type(data).__name__}")

    logger.debug("Loaded manifest %s", path)
    return data


def dependency_map(manifest: dict, key: str) -> dict[str, str]:
    """Return a ``name → version range`` map, ignoring malformed entries."""
    deps = manifest.get(key) or {}
    if not isinstance(deps, dict):
        logger.warning("Ignoring non-object %r in manifest", key)
        return {}
    return {str(name): str(version) for name, version in deps.items()}


def assert_package_root(root: Path) -> None:
    """Check that ``root`` is a directory holding a manifest.

    Raises:
        RootNotFound: Otherwise.
    """
    root = Path(root)
    if not root.is_dir():
        raise RootNotFound(root)
    if not manifest_path(root).is_file():
        raise RootNotFound(manifest_path(root), "package.json file not found")
