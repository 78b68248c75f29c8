"""
Transit link store — user-scoped JSON document outside any project.

Location (first match):
    $DEPSADMIN_STORE_DIR/store.json
    <store_dir setting>/store.json
    $XDG_CONFIG_HOME/package-deps-admin/store.json
    ~/.config/package-deps-admin/store.json

Reads are best-effort: a missing, corrupt or invalid document reads as
empty, and every such failure goes to the ``on_read_error`` hook
(default: a warning log) instead of raising. Writes are atomic (write
to temp file, then rename).
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from depsadmin.core.errors import StoreReadFailure
from depsadmin.core.models.transit import StoreDocument, TransitLink, make_link_id

logger = logging.getLogger(__name__)

APP_DIR_NAME = "package-deps-admin"
DEFAULT_STORE_FILE = "store.json"
STORE_DIR_ENV = "DEPSADMIN_STORE_DIR"

ReadErrorHook = Callable[[StoreReadFailure], None]


def default_store_dir(configured: Path | str | None = None) -> Path:
    """User-scoped directory holding the store.

    $DEPSADMIN_STORE_DIR wins over ``configured`` (the store_dir setting).
    """
    env = os.environ.get(STORE_DIR_ENV)
    if env:
        return Path(env).expanduser()
    if configured:
        return Path(configured).expanduser()
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / APP_DIR_NAME
    return Path.home() / ".config" / APP_DIR_NAME


def default_store_path(configured_dir: Path | str | None = None) -> Path:
    return default_store_dir(configured_dir) / DEFAULT_STORE_FILE


def _log_read_error(failure: StoreReadFailure) -> None:
    logger.warning("%s; continuing with empty store data", failure)


class TransitLinkStore:
    """Durable key/value store holding transit links.

    Args:
        path: Store file (default: ``default_store_path()``).
        package_version: Version of the running package-deps-admin. When
            it differs from the cached one, the cached value is updated.
        on_read_error: Diagnostic hook for corrupt or unreadable data.
    """

    def __init__(
        self,
        path: Path | None = None,
        *,
        package_version: str | None = None,
        on_read_error: ReadErrorHook | None = None,
    ) -> None:
        self._path = path or default_store_path()
        self._on_read_error = on_read_error or _log_read_error

        if package_version is not None:
            self._check_version(package_version)

    @property
    def path(self) -> Path:
        return self._path

    # ── Document I/O ────────────────────────────────────────────

    def _report(self, detail: str) -> None:
        try:
            self._on_read_error(StoreReadFailure(self._path, detail))
        except Exception:
            logger.debug("Store read-error hook raised", exc_info=True)

    def _read(self) -> StoreDocument:
        """Load the document; never raises."""
        if not self._path.is_file():
            return StoreDocument()

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            self._report(str(e))
            return StoreDocument()

        if not isinstance(data, dict):
            self._report(f"expected a JSON object, got {type(data).__name__}")
            return StoreDocument()

        # Validate links one by one so a single bad record doesn't drop the rest
        raw_links = data.pop("transit_links", [])
        try:
            doc = StoreDocument.model_validate(data)
        except ValidationError as e:
            self._report(f"invalid store document: {e}")
            doc = StoreDocument()

        if not isinstance(raw_links, list):
            self._report("transit_links is not a list")
            raw_links = []

        for index, raw in enumerate(raw_links):
            try:
                doc.transit_links.append(TransitLink.model_validate(raw))
            except ValidationError as e:
                self._report(f"skipping invalid transit link #{index}: {e}")

        return doc

    def _write(self, doc: StoreDocument) -> None:
        """Persist the document atomically."""
        self._path.parent.mkdir(parents=True, exist_ok=True)

        data = doc.model_dump(mode="json")
        content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"

        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=".store_",
                suffix=".tmp",
            )
            os.close(fd)
            tmp = Path(tmp_path)
            try:
                tmp.write_text(content, encoding="utf-8")
                tmp.replace(self._path)
                logger.debug("Store saved to %s", self._path)
            except Exception:
                tmp.unlink(missing_ok=True)
                raise
        except Exception as e:
            logger.error("Failed to save store to %s: %s", self._path, e)
            raise

    def _check_version(self, package_version: str) -> None:
        doc = self._read()
        if doc.package_version == package_version:
            return
        logger.info(
            "Store upgraded from %s to %s",
            doc.package_version or "(none)",
            package_version,
        )
        doc.package_version = package_version
        self._write(doc)

    # ── Generic accessors ───────────────────────────────────────

    def get(self, key: str, default: Any = None) -> Any:
        """Value stored under ``key``, or ``default``."""
        return self._read().values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store a JSON-serializable ``value`` under ``key``."""
        doc = self._read()
        doc.values[key] = value
        self._write(doc)

    @property
    def package_version(self) -> str:
        return self._read().package_version

    # ── Transit links ───────────────────────────────────────────

    def get_links(self) -> list[TransitLink]:
        """All stored links (empty when nothing is stored)."""
        return list(self._read().transit_links)

    def get_link(self, link_id: str) -> TransitLink | None:
        for link in self.get_links():
            if link.id == link_id:
                return link
        return None

    def find_link(self, source_name: str, dest_name: str) -> TransitLink | None:
        """The link recorded for a source → dest pair."""
        for link in self.get_links():
            if link.source.name == source_name and link.dest.name == dest_name:
                return link
        return self.get_link(make_link_id(source_name, dest_name))

    def save_link(self, link: TransitLink) -> None:
        """Insert ``link``, replacing any stored link with the same id."""
        doc = self._read()
        replaced = any(existing.id == link.id for existing in doc.transit_links)
        doc.transit_links = [existing for existing in doc.transit_links if existing.id != link.id]
        doc.transit_links.append(link)
        self._write(doc)
        logger.debug("%s transit link %s", "Replaced" if replaced else "Saved", link.id)

    def remove_link(self, link_id: str) -> bool:
        """Delete the link with ``link_id``. Returns False if there was none."""
        doc = self._read()
        kept = [link for link in doc.transit_links if link.id != link_id]
        if len(kept) == len(doc.transit_links):
            return False
        doc.transit_links = kept
        self._write(doc)
        logger.debug("Removed transit link %s", link_id)
        return True
