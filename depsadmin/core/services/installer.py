"""
Install / uninstall orchestration — how dependency changes are executed.

The orchestrators never decide *what* to install. Callers hand them
per-category instructions; they synthesize the backend command, run it
through an adapter, and recover when it fails:

- install: runtime, then dev, then global. A failed category runs its
  own compensating action and the remaining categories still run.
- uninstall: one batched command. On failure, the requested names the
  domain actually declared are reinstalled into their original
  category, and the failure is still reported.

Validation errors (missing root, unknown or missing backend) raise
before anything is spawned. Execution errors are reported, not raised.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from depsadmin.adapters.base import Adapter, ExecutionContext
from depsadmin.adapters.shell.command import ShellCommandAdapter
from depsadmin.core.errors import BackendUnavailable, DepsAdminError
from depsadmin.core.models.action import Receipt
from depsadmin.core.models.dependency import DependencyRef
from depsadmin.core.services.commands import (
    DEFAULT_BACKEND,
    CommandOptions,
    backend_spec,
    build_install_command,
    build_uninstall_command,
    format_command,
)
from depsadmin.core.services.compensation import (
    CompensatingAction,
    CompensationResult,
    NoCompensation,
    run_compensation,
)
from depsadmin.core.services.deps_util import RefLike, as_refs, flatten, render_refs, unique
from depsadmin.core.services.manifest import assert_package_root

if TYPE_CHECKING:
    from depsadmin.core.services.package_domain import PackageDomain

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  Options
# ═══════════════════════════════════════════════════════════════════


@dataclass
class InstallInstruction:
    """Dependencies for one category plus the action undoing a failure."""

    dependencies: list[DependencyRef] = field(default_factory=list)
    undo: CompensatingAction = field(default_factory=NoCompensation)

    @classmethod
    def of(cls, dependencies: Sequence[RefLike], undo: CompensatingAction | None = None) -> InstallInstruction:
        return cls(dependencies=as_refs(dependencies), undo=undo or NoCompensation())


@dataclass
class InstallOptions:
    """Everything an install needs.

    ``domain=None`` means a manifest-less (global) context: no root is
    validated and commands run in the current directory.
    """

    domain: PackageDomain | None = None
    runtime_instruction: InstallInstruction | None = None
    dev_instruction: InstallInstruction | None = None
    global_instruction: InstallInstruction | None = None
    backend: str | None = None
    version_specific: bool = False
    use_legacy_peer_deps: bool = False
    use_force: bool = False
    extra_flags: list[str] = field(default_factory=list)

    def instructions(self) -> list[tuple[str, InstallInstruction | None]]:
        """Instructions in execution order."""
        return [
            ("runtime", self.runtime_instruction),
            ("dev", self.dev_instruction),
            ("global", self.global_instruction),
        ]

    def command_options(self) -> CommandOptions:
        return CommandOptions(
            use_force=self.use_force,
            use_legacy_peer_deps=self.use_legacy_peer_deps,
            version_specific=self.version_specific,
            extra_flags=list(self.extra_flags),
        )


# ═══════════════════════════════════════════════════════════════════
#  Reports
# ═══════════════════════════════════════════════════════════════════


@dataclass
class CategoryResult:
    """Outcome of one category's install command."""

    category: str
    dependencies: list[str]
    command: list[str]
    receipt: Receipt
    compensation: CompensationResult | None = None

    @property
    def ok(self) -> bool:
        return self.receipt.ok

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "dependencies": self.dependencies,
            "command": format_command(self.command),
            "ok": self.ok,
            "error": self.receipt.error,
            "compensation": self.compensation.to_dict() if self.compensation else None,
        }


@dataclass
class InstallReport:
    """Result of an install orchestration."""

    backend: str = ""
    categories: dict[str, CategoryResult] = field(default_factory=dict)
    no_dependencies: bool = False

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.categories.values() if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.categories.values() if not r.ok)

    @property
    def status(self) -> str:
        if self.no_dependencies:
            return "no_dependencies"
        if self.failed == 0:
            return "ok"
        if self.succeeded > 0:
            return "partial"
        return "failed"

    @property
    def ok(self) -> bool:
        return self.status in ("ok", "no_dependencies")

    @property
    def receipts(self) -> list[Receipt]:
        return [r.receipt for r in self.categories.values()]

    def to_dict(self) -> dict:
        return {
            "backend": self.backend,
            "status": self.status,
            "categories": {k: v.to_dict() for k, v in self.categories.items()},
        }


@dataclass
class UninstallReport:
    """Result of an uninstall orchestration, including any rollback."""

    backend: str = ""
    dependencies: list[str] = field(default_factory=list)
    command: list[str] = field(default_factory=list)
    receipt: Receipt | None = None
    rollback_runtime: InstallReport | None = None
    rollback_dev: InstallReport | None = None
    rollback_error: str | None = None

    @property
    def status(self) -> str:
        if self.receipt is None:
            return "no_dependencies"
        return "ok" if self.receipt.ok else "failed"

    @property
    def ok(self) -> bool:
        return self.status in ("ok", "no_dependencies")

    @property
    def rolled_back(self) -> bool:
        return self.rollback_runtime is not None or self.rollback_dev is not None

    def to_dict(self) -> dict:
        return {
            "backend": self.backend,
            "status": self.status,
            "dependencies": self.dependencies,
            "command": format_command(self.command) if self.command else "",
            "error": self.receipt.error if self.receipt else None,
            "rollback": {
                "runtime": self.rollback_runtime.to_dict() if self.rollback_runtime else None,
                "dev": self.rollback_dev.to_dict() if self.rollback_dev else None,
                "error": self.rollback_error,
            },
        }


# ═══════════════════════════════════════════════════════════════════
#  Internal helpers
# ═══════════════════════════════════════════════════════════════════


def resolve_backend(backend: str | None, domain: PackageDomain | None) -> str:
    """Explicit override, else the domain's backend, else npm."""
    if backend:
        return backend
    if domain is not None and domain.backend:
        return domain.backend
    return DEFAULT_BACKEND


def assert_backend(backend: str, adapter: Adapter) -> None:
    """Raise ``BackendUnavailable`` unless the backend can be run."""
    spec = backend_spec(backend)
    if not adapter.is_available(spec["cli"]):
        raise BackendUnavailable(backend)


def _log_output(receipt: Receipt) -> None:
    if receipt.stdout:
        logger.info(receipt.stdout)
    # on failure stderr is already the receipt error
    if receipt.stderr and receipt.ok:
        logger.warning(receipt.stderr)


# ═══════════════════════════════════════════════════════════════════
#  Install
# ═══════════════════════════════════════════════════════════════════


def install_dependencies(options: InstallOptions, *, adapter: Adapter | None = None) -> InstallReport:
    """Install runtime, dev and global dependencies (in that order).

    Args:
        options: Instructions per category plus command modifiers.
        adapter: Command runner (default: real subprocess execution).

    Returns:
        InstallReport; ``status == "no_dependencies"`` when every
        instruction is empty (nothing is executed).

    Raises:
        RootNotFound: Domain root missing or without package.json.
        BackendUnavailable: Backend unknown or not on PATH.
    """
    adapter = adapter or ShellCommandAdapter()
    domain = options.domain
    backend = resolve_backend(options.backend, domain)

    if domain is not None:
        assert_package_root(domain.root)
    assert_backend(backend, adapter)

    report = InstallReport(backend=backend)

    planned = [
        (category, instruction)
        for category, instruction in options.instructions()
        if instruction is not None and instruction.dependencies
    ]
    if not planned:
        logger.warning("No dependencies specified")
        report.no_dependencies = True
        return report

    cmd_options = options.command_options()
    root_cwd = str(domain.root) if domain is not None else None

    for category, instruction in planned:
        refs = as_refs(instruction.dependencies)
        command = build_install_command(backend, category, refs, cmd_options)
        display = flatten(refs, options.version_specific)

        logger.info("Installing %s dependencies: %s", category, display)
        receipt = adapter.run(ExecutionContext(
            action_id=category,
            command=command,
            cwd=None if category == "global" else root_cwd,
        ))
        _log_output(receipt)

        result = CategoryResult(
            category=category,
            dependencies=render_refs(refs, options.version_specific),
            command=command,
            receipt=receipt,
        )

        if receipt.ok:
            logger.info("Installed %s dependencies: %s", category, display)
        else:
            logger.error(
                "Failed to install %s dependencies [%s] with `%s`: %s",
                category,
                display,
                format_command(command),
                receipt.error,
            )
            result.compensation = run_compensation(instruction.undo, f"{category} install")

        report.categories[category] = result

    return report


# ═══════════════════════════════════════════════════════════════════
#  Uninstall
# ═══════════════════════════════════════════════════════════════════


def uninstall_dependencies(
    domain: PackageDomain,
    dependencies: Sequence[RefLike],
    *,
    backend: str | None = None,
    options: CommandOptions | None = None,
    adapter: Adapter | None = None,
) -> UninstallReport:
    """Remove ``dependencies`` from the domain in one batched command.

    On failure, the requested names the domain had declared (as loaded
    before this call) are reinstalled into their original category with
    their declared version ranges. Unknown names are never reinstalled.
    The report stays ``failed`` whatever the rollback outcome.

    Raises:
        RootNotFound: Domain root missing or without package.json.
        BackendUnavailable: Backend unknown or not on PATH.
    """
    adapter = adapter or ShellCommandAdapter()
    options = options or CommandOptions()
    backend = resolve_backend(backend, domain)

    assert_package_root(domain.root)
    assert_backend(backend, adapter)

    refs = unique(dependencies)
    report = UninstallReport(backend=backend, dependencies=[r.name for r in refs])

    if not refs:
        logger.warning("No dependencies to remove")
        return report

    display = flatten(refs)
    command = build_uninstall_command(backend, refs, options)
    report.command = command

    logger.info("Uninstalling dependencies: %s", display)
    receipt = adapter.run(ExecutionContext(
        action_id="uninstall",
        command=command,
        cwd=str(domain.root),
    ))
    _log_output(receipt)
    report.receipt = receipt

    if receipt.ok:
        logger.info("Uninstalled dependencies: %s", display)
        return report

    logger.error(
        "Failed to uninstall dependencies [%s] with `%s`: %s",
        display,
        format_command(command),
        receipt.error,
    )

    known = [d for d in (domain.find_dependency(r) for r in refs) if d is not None]
    runtime_subset = [d for d in known if domain.is_runtime_dependency(d)]
    dev_subset = [d for d in known if domain.is_dev_dependency(d)]

    if not runtime_subset and not dev_subset:
        logger.info("Nothing to roll back: none of [%s] was declared by %s", display, domain.name or domain.root)
        return report

    rollback_options = dict(
        domain=domain,
        backend=backend,
        version_specific=True,
        use_legacy_peer_deps=options.use_legacy_peer_deps,
        use_force=options.use_force,
        extra_flags=list(options.extra_flags),
    )

    try:
        if runtime_subset:
            logger.warning("Rolling back runtime dependencies: %s", flatten(runtime_subset, True))
            report.rollback_runtime = install_dependencies(
                InstallOptions(runtime_instruction=InstallInstruction.of(runtime_subset), **rollback_options),
                adapter=adapter,
            )
        if dev_subset:
            logger.warning("Rolling back dev dependencies: %s", flatten(dev_subset, True))
            report.rollback_dev = install_dependencies(
                InstallOptions(dev_instruction=InstallInstruction.of(dev_subset), **rollback_options),
                adapter=adapter,
            )
    except DepsAdminError as e:
        logger.error("Rollback after failed uninstall could not run: %s", e)
        report.rollback_error = str(e)

    return report
