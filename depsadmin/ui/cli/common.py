"""
Shared CLI plumbing — root/settings/domain resolution and report output.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import Any

import click

from depsadmin import __version__
from depsadmin.adapters.base import Adapter
from depsadmin.adapters.mock import MockAdapter
from depsadmin.adapters.shell.command import ShellCommandAdapter
from depsadmin.core.config.loader import Settings, load_settings
from depsadmin.core.errors import DepsAdminError
from depsadmin.core.persistence.store import TransitLinkStore, default_store_path
from depsadmin.core.services.commands import CommandOptions, format_command
from depsadmin.core.services.installer import InstallReport, UninstallReport
from depsadmin.core.services.package_domain import (
    PackageDomain,
    ReinstallReport,
    get_package_domain_for_root,
)


def resolve_root(ctx: click.Context) -> Path:
    """Package root from --root, else CWD."""
    root = ctx.obj.get("root")
    return Path(root).resolve() if root else Path.cwd()


def get_settings(ctx: click.Context) -> Settings:
    """Settings from --config or depsadmin.yml (loaded once per invocation)."""
    if ctx.obj.get("settings") is None:
        ctx.obj["settings"] = load_settings(
            ctx.obj.get("config_path"),
            start_dir=resolve_root(ctx),
        )
    return ctx.obj["settings"]


def get_adapter(ctx: click.Context) -> Adapter:
    if ctx.obj.get("adapter") is None:
        ctx.obj["adapter"] = MockAdapter() if ctx.obj.get("mock") else ShellCommandAdapter()
    return ctx.obj["adapter"]


def build_domain(
    ctx: click.Context,
    root: Path | str | None = None,
    *,
    package_manager: str | None = None,
    force: bool = False,
    legacy_peer_deps: bool = False,
    extra_flags: tuple[str, ...] = (),
) -> PackageDomain:
    """Domain for ``root`` (default: the resolved root) with CLI overrides."""
    settings = get_settings(ctx)
    flags = CommandOptions(
        use_force=force,
        use_legacy_peer_deps=legacy_peer_deps or settings.legacy_peer_deps,
        extra_flags=[*settings.extra_flags, *extra_flags],
    )
    return get_package_domain_for_root(
        root if root is not None else resolve_root(ctx),
        package_manager,
        settings=settings,
        adapter=get_adapter(ctx),
        flags=flags,
    )


def open_store(ctx: click.Context) -> TransitLinkStore:
    """Open the transit link store and run its version check.

    Only the transit commands call this, so the version check runs there
    rather than at CLI startup: ``--help`` and ``status`` never write to the
    user config directory.
    """
    settings = get_settings(ctx)
    return TransitLinkStore(
        default_store_path(settings.store_dir),
        package_version=__version__,
    )


def handle_errors(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Turn fatal domain errors into a red message and exit code 1."""

    @wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except DepsAdminError as e:
            click.secho(f"❌ {e}", fg="red")
            sys.exit(1)

    return wrapper


# ── Output ──────────────────────────────────────────────────────


def echo_json(data: dict) -> None:
    click.echo(json.dumps(data, indent=2))


def echo_install_report(report: InstallReport, title: str = "Install") -> None:
    if report.status == "no_dependencies":
        click.secho(f"⚠️  {title}: no dependencies specified", fg="yellow")
        return

    for result in report.categories.values():
        deps = " ".join(result.dependencies)
        if result.ok:
            click.secho(f"   ✓ {result.category}", fg="green", nl=False)
            click.echo(f"  {deps}")
        else:
            click.secho(f"   ✗ {result.category}", fg="red", nl=False)
            click.echo(f"  {deps}")
            click.echo(f"     │ command: {format_command(result.command)}")
            if result.receipt.error:
                for line in result.receipt.error.split("\n")[:5]:
                    click.echo(f"     │ {line}")
            if result.compensation and not result.compensation.ok:
                click.secho(f"     │ undo failed: {result.compensation.error}", fg="red")

    status_color = {"ok": "green", "partial": "yellow", "failed": "red"}.get(report.status, "white")
    click.secho(
        f"   {title} ({report.backend}): {report.succeeded}/{len(report.categories)} succeeded",
        fg=status_color,
        bold=True,
    )


def echo_uninstall_report(report: UninstallReport, title: str = "Uninstall") -> None:
    if report.status == "no_dependencies":
        click.secho(f"⚠️  {title}: no dependencies to remove", fg="yellow")
        return

    deps = " ".join(report.dependencies)
    if report.ok:
        click.secho(f"   ✓ {title} ({report.backend})", fg="green", nl=False)
        click.echo(f"  {deps}")
        return

    click.secho(f"   ✗ {title} ({report.backend})", fg="red", nl=False)
    click.echo(f"  {deps}")
    click.echo(f"     │ command: {format_command(report.command)}")
    if report.receipt and report.receipt.error:
        for line in report.receipt.error.split("\n")[:5]:
            click.echo(f"     │ {line}")

    if report.rolled_back:
        click.secho("   ↺ Rolled back declared dependencies:", fg="yellow")
        for rollback in (report.rollback_runtime, report.rollback_dev):
            if rollback is not None:
                echo_install_report(rollback, title="Rollback")
    if report.rollback_error:
        click.secho(f"     │ rollback failed: {report.rollback_error}", fg="red")


def echo_reinstall_report(report: ReinstallReport) -> None:
    echo_uninstall_report(report.removal, title="Remove")
    if report.install is not None:
        echo_install_report(report.install, title="Reinstall")
