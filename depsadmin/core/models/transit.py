"""
Transit link models — the only state that outlives a CLI invocation.

A transit copies the dependencies a source package has (and a
destination lacks) into the destination. The link records exactly which
names were copied so the copy can be reversed precisely later.

Serialized into the user-scoped store document (see
``depsadmin.core.persistence.store``).
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

LINK_SEPARATOR = "::to::"


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


def make_link_id(source_name: str, dest_name: str) -> str:
    """Build the id of the link between two packages ("<source>::to::<dest>")."""
    return f"{source_name}{LINK_SEPARATOR}{dest_name}"


class PackageDomainRef(BaseModel):
    """Serializable identity of a package domain."""

    name: str = ""
    version: str = ""
    root: str = ""
    backend: str = "npm"


class TransitedDependencies(BaseModel):
    """Names copied into the destination, split by category."""

    runtime: list[str] = Field(default_factory=list)
    dev: list[str] = Field(default_factory=list)

    @property
    def all_names(self) -> list[str]:
        return [*self.runtime, *self.dev]

    @property
    def empty(self) -> bool:
        return not self.runtime and not self.dev


class TransitLink(BaseModel):
    """Record of one source → dest transit."""

    id: str
    source: PackageDomainRef
    dest: PackageDomainRef
    transited_dependencies: TransitedDependencies = Field(default_factory=TransitedDependencies)
    created_at: str = Field(default_factory=_now_iso)

    @classmethod
    def between(
        cls,
        source: PackageDomainRef,
        dest: PackageDomainRef,
        *,
        runtime: list[str] | None = None,
        dev: list[str] | None = None,
    ) -> TransitLink:
        """Create a link with the id derived from both package names."""
        return cls(
            id=make_link_id(source.name, dest.name),
            source=source,
            dest=dest,
            transited_dependencies=TransitedDependencies(
                runtime=list(runtime or []),
                dev=list(dev or []),
            ),
        )


class StoreDocument(BaseModel):
    """Root document of the persisted store."""

    # ── Schema ───────────────────────────────────────────────────
    schema_version: int = 1

    # ── Version of package-deps-admin that last opened the store ──
    package_version: str = ""

    # ── Transit links ────────────────────────────────────────────
    transit_links: list[TransitLink] = Field(default_factory=list)

    # ── Generic key/value entries ────────────────────────────────
    values: dict[str, Any] = Field(default_factory=dict)
