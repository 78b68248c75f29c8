"""
Package domain — one package.json and the dependencies it declares.

A domain is built once per invocation from the manifest on disk and
owns that snapshot. It never watches the file: after an operation that
changed the manifest, call ``reload()`` when fresh lists matter.

Mutating methods are thin delegations to the orchestrators in
``depsadmin.core.services.installer``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from depsadmin.adapters.base import Adapter
from depsadmin.adapters.shell.command import ShellCommandAdapter
from depsadmin.core.errors import ManifestNotFound
from depsadmin.core.models.dependency import Dependency, DependencyRef
from depsadmin.core.models.transit import PackageDomainRef
from depsadmin.core.services.backend_detect import detect_backend
from depsadmin.core.services.commands import CommandOptions
from depsadmin.core.services.compensation import CompensatingAction
from depsadmin.core.services.deps_util import RefLike, as_ref, find, ref_name, unique
from depsadmin.core.services.installer import (
    InstallInstruction,
    InstallOptions,
    InstallReport,
    UninstallReport,
    install_dependencies,
    uninstall_dependencies,
)
from depsadmin.core.services.manifest import dependency_map, read_manifest

if TYPE_CHECKING:
    from depsadmin.core.config.loader import Settings

logger = logging.getLogger(__name__)

# Seconds between removal and reinstallation, so the backend can
# release its lock file before the next invocation.
DEFAULT_REINSTALL_DELAY = 1.0


def pause(seconds: float, message: str | None = None) -> None:
    """Block for ``seconds`` (no-op when not positive)."""
    if seconds <= 0:
        return
    if message:
        logger.info(message)
    time.sleep(seconds)


@dataclass
class ReinstallReport:
    """Removal followed by installation."""

    removal: UninstallReport
    install: InstallReport | None = None

    @property
    def status(self) -> str:
        if not self.removal.ok:
            return "failed"
        if self.install is None:
            return self.removal.status
        return self.install.status

    @property
    def ok(self) -> bool:
        return self.status in ("ok", "no_dependencies")

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "removal": self.removal.to_dict(),
            "install": self.install.to_dict() if self.install else None,
        }


class PackageDomain:
    """A package root whose dependencies are managed by one backend.

    Args:
        root: Directory containing package.json.
        backend: npm, yarn, pnpm or bun. None = detect from the manifest
            and lock files.
        tag: Free-form label for log output.
        adapter: Command runner (default: real subprocess execution).
        flags: Default command modifiers for installs and removals.
        reinstall_delay: Pause between removal and reinstallation.
    """

    def __init__(
        self,
        root: Path | str,
        backend: str | None = None,
        *,
        tag: str = "",
        adapter: Adapter | None = None,
        flags: CommandOptions | None = None,
        reinstall_delay: float = DEFAULT_REINSTALL_DELAY,
    ) -> None:
        self.root = Path(root).resolve()
        self.tag = tag
        self.adapter = adapter or ShellCommandAdapter()
        self.flags = flags or CommandOptions()
        self.reinstall_delay = reinstall_delay

        self._backend_override = backend
        self.backend: str = backend or "npm"
        self.name = ""
        self.version = ""
        self.manifest_found = False
        self.runtime_dependencies: list[Dependency] = []
        self.dev_dependencies: list[Dependency] = []

        self.load()

    def __repr__(self) -> str:
        return f"<PackageDomain {self.name or '?'}@{self.version or '?'} root={str(self.root)!r} backend={self.backend}>"

    # ── Lifecycle ───────────────────────────────────────────────

    def load(self) -> None:
        """Read the manifest into this domain.

        A missing or unreadable manifest is treated as an empty package
        so freshly initialized directories still work.
        """
        try:
            manifest = read_manifest(self.root)
            self.manifest_found = True
        except ManifestNotFound as e:
            logger.warning("%s; treating %s as an empty package", e, self.root)
            manifest = {}
            self.manifest_found = False

        self.name = str(manifest.get("name") or "")
        self.version = str(manifest.get("version") or "")
        self.backend = self._backend_override or detect_backend(self.root, manifest)

        runtime = [
            Dependency(name=name, version=version)
            for name, version in dependency_map(manifest, "dependencies").items()
        ]
        runtime_names = {d.name for d in runtime}

        dev = []
        for name, version in dependency_map(manifest, "devDependencies").items():
            if name in runtime_names:
                logger.warning(
                    "%s is declared as both a runtime and a dev dependency; keeping the runtime entry",
                    name,
                )
                continue
            dev.append(Dependency(name=name, version=version))

        self.runtime_dependencies = runtime
        self.dev_dependencies = dev

    def reload(self) -> None:
        """Re-read the manifest, replacing the in-memory lists."""
        self.load()

    def to_ref(self) -> PackageDomainRef:
        return PackageDomainRef(
            name=self.name,
            version=self.version,
            root=str(self.root),
            backend=self.backend,
        )

    # ── Queries ─────────────────────────────────────────────────

    def is_runtime_dependency(self, ref: RefLike) -> bool:
        return find(self.runtime_dependencies, ref_name(ref)) is not None

    def is_dev_dependency(self, ref: RefLike) -> bool:
        return find(self.dev_dependencies, ref_name(ref)) is not None

    def has_dependency(self, ref: RefLike) -> bool:
        return self.is_runtime_dependency(ref) or self.is_dev_dependency(ref)

    def find_dependency(self, ref: RefLike) -> Dependency | None:
        """The declared dependency named like ``ref``, in either list."""
        name = ref_name(ref)
        for dep in (*self.runtime_dependencies, *self.dev_dependencies):
            if dep.name == name:
                return dep
        return None

    def category_of(self, ref: RefLike) -> str | None:
        """'runtime', 'dev', or None if the domain does not declare it."""
        if self.is_runtime_dependency(ref):
            return "runtime"
        if self.is_dev_dependency(ref):
            return "dev"
        return None

    def partition(
        self,
        refs: Sequence[RefLike],
        category: str | None = None,
    ) -> tuple[list[DependencyRef], list[DependencyRef]]:
        """Split references into (runtime, dev).

        An explicit ``category`` puts everything in that list. Otherwise
        each reference goes where the domain declares it; undeclared
        names count as runtime.
        """
        refs = unique(refs)
        if category == "runtime":
            return refs, []
        if category == "dev":
            return [], refs

        runtime: list[DependencyRef] = []
        dev: list[DependencyRef] = []
        for ref in refs:
            (dev if self.is_dev_dependency(ref) else runtime).append(ref)
        return runtime, dev

    # ── Install ─────────────────────────────────────────────────

    def _install_options(self, version_specific: bool | None = None, **instructions) -> InstallOptions:
        return InstallOptions(
            domain=self,
            backend=self.backend,
            version_specific=self.flags.version_specific if version_specific is None else version_specific,
            use_legacy_peer_deps=self.flags.use_legacy_peer_deps,
            use_force=self.flags.use_force,
            extra_flags=list(self.flags.extra_flags),
            **instructions,
        )

    def install(
        self,
        runtime: Sequence[RefLike] = (),
        dev: Sequence[RefLike] = (),
        *,
        version_specific: bool | None = None,
        runtime_undo: CompensatingAction | None = None,
        dev_undo: CompensatingAction | None = None,
    ) -> InstallReport:
        """Install runtime and dev references in one orchestration."""
        return install_dependencies(
            self._install_options(
                version_specific,
                runtime_instruction=InstallInstruction.of(runtime, runtime_undo),
                dev_instruction=InstallInstruction.of(dev, dev_undo),
            ),
            adapter=self.adapter,
        )

    def install_runtime_dependency(self, ref: RefLike, undo: CompensatingAction | None = None) -> InstallReport:
        return self.install_runtime_dependencies([ref], undo)

    def install_runtime_dependencies(
        self,
        refs: Sequence[RefLike],
        undo: CompensatingAction | None = None,
        *,
        version_specific: bool | None = None,
    ) -> InstallReport:
        return self.install(refs, (), version_specific=version_specific, runtime_undo=undo)

    def install_dev_dependency(self, ref: RefLike, undo: CompensatingAction | None = None) -> InstallReport:
        return self.install_dev_dependencies([ref], undo)

    def install_dev_dependencies(
        self,
        refs: Sequence[RefLike],
        undo: CompensatingAction | None = None,
        *,
        version_specific: bool | None = None,
    ) -> InstallReport:
        return self.install((), refs, version_specific=version_specific, dev_undo=undo)

    # ── Remove ──────────────────────────────────────────────────

    def remove_dependency(self, ref: RefLike) -> UninstallReport:
        return self.remove_dependencies([ref])

    def remove_dependencies(self, refs: Sequence[RefLike]) -> UninstallReport:
        return uninstall_dependencies(
            self,
            [as_ref(r) for r in refs],
            backend=self.backend,
            options=self.flags,
            adapter=self.adapter,
        )

    def remove_runtime_dependencies(self) -> UninstallReport:
        return self.remove_dependencies(self.runtime_dependencies)

    def remove_dev_dependencies(self) -> UninstallReport:
        return self.remove_dependencies(self.dev_dependencies)

    def remove_all_dependencies(self) -> UninstallReport:
        return self.remove_dependencies([*self.runtime_dependencies, *self.dev_dependencies])

    # ── Reinstall ───────────────────────────────────────────────

    def _reinstall(
        self,
        runtime: list[DependencyRef],
        dev: list[DependencyRef],
        version_specific: bool | None,
    ) -> ReinstallReport:
        removal = self.remove_dependencies([*runtime, *dev])
        report = ReinstallReport(removal=removal)

        if removal.status == "no_dependencies":
            return report
        if not removal.ok:
            # the uninstall orchestrator already restored what was declared
            logger.error("Skipping reinstall: removal failed")
            return report

        pause(self.reinstall_delay, "Waiting for the package manager to release its lock...")
        report.install = self.install(runtime, dev, version_specific=version_specific)
        return report

    def reinstall_dependency(self, ref: RefLike, category: str | None = None) -> ReinstallReport:
        return self.reinstall_dependencies([ref], category)

    def reinstall_dependencies(self, refs: Sequence[RefLike], category: str | None = None) -> ReinstallReport:
        """Uninstall then install ``refs``, e.g. to upgrade them.

        Each reference keeps the category the domain declares it in,
        unless ``category`` forces one; undeclared names go to runtime.
        """
        runtime, dev = self.partition(refs, category)
        return self._reinstall(runtime, dev, version_specific=None)

    def reinstall_runtime_dependencies(self) -> ReinstallReport:
        """Reinstall every declared runtime dependency at its declared range."""
        return self._reinstall(list(self.runtime_dependencies), [], version_specific=True)

    def reinstall_dev_dependencies(self) -> ReinstallReport:
        """Reinstall every declared dev dependency at its declared range."""
        return self._reinstall([], list(self.dev_dependencies), version_specific=True)

    def reinstall_all_dependencies(self) -> ReinstallReport:
        return self._reinstall(
            list(self.runtime_dependencies),
            list(self.dev_dependencies),
            version_specific=True,
        )


def get_package_domain_for_root(
    root: Path | str,
    backend: str | None = None,
    *,
    settings: Settings | None = None,
    adapter: Adapter | None = None,
    flags: CommandOptions | None = None,
) -> PackageDomain:
    """Build the domain for ``root``, applying settings defaults.

    Explicit ``backend`` and ``flags`` take precedence over settings.
    """
    reinstall_delay = DEFAULT_REINSTALL_DELAY
    if settings is not None:
        backend = backend or settings.package_manager
        reinstall_delay = settings.reinstall_delay
        if flags is None:
            flags = CommandOptions(
                use_legacy_peer_deps=settings.legacy_peer_deps,
                extra_flags=list(settings.extra_flags),
            )

    return PackageDomain(
        root,
        backend,
        adapter=adapter,
        flags=flags,
        reinstall_delay=reinstall_delay,
    )
