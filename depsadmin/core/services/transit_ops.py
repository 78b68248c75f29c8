"""
Transit — share a package's dependencies with another package, and undo it.

Typical use: while developing library P locally inside host app Q, the
dependencies P declares but Q lacks are installed into Q ("transited").
The exact names are recorded in the store so that
``remove_transit_dependencies`` removes precisely those later, rather
than re-diffing the two manifests at reversal time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from depsadmin.core.models.transit import PackageDomainRef, TransitLink
from depsadmin.core.persistence.store import TransitLinkStore
from depsadmin.core.services.installer import InstallReport, UninstallReport
from depsadmin.core.services.package_domain import PackageDomain

logger = logging.getLogger(__name__)


@dataclass
class TransitResult:
    """Outcome of a transit: what was installed and the link recorded."""

    link: TransitLink
    install: InstallReport

    @property
    def ok(self) -> bool:
        return self.install.ok

    def to_dict(self) -> dict:
        return {
            "link": self.link.model_dump(mode="json"),
            "install": self.install.to_dict(),
        }


def _missing_names(source: list, present: set[str]) -> list[str]:
    """Names in ``source`` not in ``present``, source order, no repeats."""
    out: list[str] = []
    for dep in source:
        if dep.name not in present and dep.name not in out:
            out.append(dep.name)
    return out


def _installed(install: InstallReport, category: str, names: list[str]) -> list[str]:
    """``names`` if the category's install command succeeded, else nothing."""
    result = install.categories.get(category)
    if result is None or not result.ok:
        return []
    return names


def transit_dependencies(
    source: PackageDomain,
    dest: PackageDomain,
    *,
    store: TransitLinkStore,
) -> TransitResult:
    """Install into ``dest`` the source dependencies it lacks, and record them.

    A source name is missing when dest declares it in neither category.
    Only categories whose install succeeded are recorded in the link.
    The link is saved even when nothing was transited, replacing any
    earlier link for the same pair.

    Raises:
        RootNotFound / BackendUnavailable: From the install orchestrator.
    """
    present = {d.name for d in (*dest.runtime_dependencies, *dest.dev_dependencies)}
    runtime = _missing_names(source.runtime_dependencies, present)
    dev = _missing_names(source.dev_dependencies, present | set(runtime))

    logger.info(
        "Transiting %s -> %s: runtime=%s dev=%s",
        source.name or source.root,
        dest.name or dest.root,
        runtime,
        dev,
    )

    install = dest.install(runtime, dev)

    recorded_runtime = _installed(install, "runtime", runtime)
    recorded_dev = _installed(install, "dev", dev)
    if (recorded_runtime, recorded_dev) != (runtime, dev):
        logger.warning(
            "Transit %s -> %s incomplete; recording runtime=%s dev=%s",
            source.name or source.root,
            dest.name or dest.root,
            recorded_runtime,
            recorded_dev,
        )

    link = TransitLink.between(source.to_ref(), dest.to_ref(), runtime=recorded_runtime, dev=recorded_dev)
    store.save_link(link)

    return TransitResult(link=link, install=install)


def remove_transit_dependencies(
    source: PackageDomain,
    dest: PackageDomain,
    *,
    store: TransitLinkStore,
) -> UninstallReport | None:
    """Uninstall from ``dest`` exactly what an earlier transit installed.

    Returns None (and logs a warning) when no link exists for the pair.
    The link is deleted once the removal succeeded or had nothing to
    remove; after a failed removal it is kept so the reversal can be
    retried.
    """
    link = store.find_link(source.name, dest.name)
    if link is None:
        logger.warning(
            "No transit link from %s to %s",
            source.name or source.root,
            dest.name or dest.root,
        )
        return None

    target = _link_dest_domain(link.dest, dest)
    report = target.remove_dependencies(link.transited_dependencies.all_names)

    if report.ok:
        store.remove_link(link.id)
        logger.info("Removed transit link %s", link.id)
    else:
        logger.error("Keeping transit link %s: removal failed", link.id)

    return report


def _link_dest_domain(ref: PackageDomainRef, dest: PackageDomain) -> PackageDomain:
    """The domain to uninstall from, as recorded in the link."""
    root = ref.root or str(dest.root)
    backend = ref.backend or dest.backend
    if root == str(dest.root) and backend == dest.backend:
        return dest
    return PackageDomain(
        root,
        backend,
        adapter=dest.adapter,
        flags=dest.flags,
        reinstall_delay=dest.reinstall_delay,
    )
