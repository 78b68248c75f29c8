"""
CLI commands for installing, removing and reinstalling dependencies.

Thin wrappers over ``depsadmin.core.services.package_domain``.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from typing import Any

import click

from depsadmin.core.services.commands import BACKENDS
from depsadmin.ui.cli.common import (
    build_domain,
    echo_install_report,
    echo_json,
    echo_reinstall_report,
    echo_uninstall_report,
    handle_errors,
)


def _dependency_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Arguments and options shared by install, uninstall and reinstall."""
    decorators = [
        click.argument("names", nargs=-1),
        click.option("--runtime", "runtime", is_flag=True, help="Runtime dependencies."),
        click.option("--dev", "dev", is_flag=True, help="Dev dependencies."),
        click.option("--all", "all_", is_flag=True, help="Runtime and dev dependencies."),
        click.option("--force", is_flag=True, help="Pass --force to install commands."),
        click.option(
            "--npm-legacy-peer-deps",
            "legacy_peer_deps",
            is_flag=True,
            help="Pass --legacy-peer-deps (npm only).",
        ),
        click.option(
            "--package-manager",
            "--pm",
            "package_manager",
            type=click.Choice(BACKENDS),
            default=None,
            help="Package manager (default: auto-detect).",
        ),
        click.option(
            "--flag",
            "extra_flags",
            multiple=True,
            help="Extra flag for the package manager, e.g. --flag=--ignore-scripts (repeatable).",
        ),
        click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON."),
    ]
    for decorator in reversed(decorators):
        fn = decorator(fn)
    return fn


def _selected_category(runtime: bool, dev: bool, all_: bool) -> str | None:
    """'runtime', 'dev', 'all', or None when no category flag was given."""
    if all_ or (runtime and dev):
        return "all"
    if dev:
        return "dev"
    if runtime:
        return "runtime"
    return None


def _finish(report: Any, as_json: bool, echo: Callable[[Any], None]) -> None:
    if as_json:
        echo_json(report.to_dict())
    else:
        echo(report)
    if not report.ok:
        sys.exit(1)


@click.command()
@_dependency_options
@click.pass_context
@handle_errors
def install(
    ctx: click.Context,
    names: tuple[str, ...],
    runtime: bool,
    dev: bool,
    all_: bool,
    force: bool,
    legacy_peer_deps: bool,
    package_manager: str | None,
    extra_flags: tuple[str, ...],
    as_json: bool,
) -> None:
    """Install dependencies.

    With NAMES, --runtime or --dev picks the category; otherwise each
    name goes where package.json declares it (unknown names: runtime).
    Without NAMES, installs the declared dependencies of the selected
    category at their declared ranges.
    """
    category = _selected_category(runtime, dev, all_)
    domain = build_domain(
        ctx,
        package_manager=package_manager,
        force=force,
        legacy_peer_deps=legacy_peer_deps,
        extra_flags=extra_flags,
    )

    if names:
        if category == "dev":
            report = domain.install((), names)
        elif category == "runtime":
            report = domain.install(names, ())
        else:
            report = domain.install(*domain.partition(names))
    elif category is None:
        click.secho("❌ No dependencies provided (pass NAMES, --runtime, --dev or --all)", fg="red")
        sys.exit(1)
    else:
        report = domain.install(
            domain.runtime_dependencies if category in ("runtime", "all") else (),
            domain.dev_dependencies if category in ("dev", "all") else (),
            version_specific=True,
        )

    _finish(report, as_json, echo_install_report)


@click.command()
@_dependency_options
@click.pass_context
@handle_errors
def uninstall(
    ctx: click.Context,
    names: tuple[str, ...],
    runtime: bool,
    dev: bool,
    all_: bool,
    force: bool,
    legacy_peer_deps: bool,
    package_manager: str | None,
    extra_flags: tuple[str, ...],
    as_json: bool,
) -> None:
    """Remove dependencies in one package manager call.

    On failure, declared dependencies are reinstalled at their declared
    ranges and the command exits non-zero.
    """
    category = _selected_category(runtime, dev, all_)
    domain = build_domain(
        ctx,
        package_manager=package_manager,
        force=force,
        legacy_peer_deps=legacy_peer_deps,
        extra_flags=extra_flags,
    )

    if names:
        report = domain.remove_dependencies(names)
    elif category == "runtime":
        report = domain.remove_runtime_dependencies()
    elif category == "dev":
        report = domain.remove_dev_dependencies()
    elif category == "all":
        report = domain.remove_all_dependencies()
    else:
        click.secho("❌ No dependencies provided (pass NAMES, --runtime, --dev or --all)", fg="red")
        sys.exit(1)

    _finish(report, as_json, echo_uninstall_report)


@click.command()
@_dependency_options
@click.pass_context
@handle_errors
def reinstall(
    ctx: click.Context,
    names: tuple[str, ...],
    runtime: bool,
    dev: bool,
    all_: bool,
    force: bool,
    legacy_peer_deps: bool,
    package_manager: str | None,
    extra_flags: tuple[str, ...],
    as_json: bool,
) -> None:
    """Remove then install dependencies again.

    With NAMES, each keeps its declared category unless --runtime or
    --dev forces one. Without NAMES, reinstalls the declared
    dependencies of the selected category (default: all).
    """
    category = _selected_category(runtime, dev, all_)
    domain = build_domain(
        ctx,
        package_manager=package_manager,
        force=force,
        legacy_peer_deps=legacy_peer_deps,
        extra_flags=extra_flags,
    )

    if names:
        report = domain.reinstall_dependencies(
            names,
            category if category in ("runtime", "dev") else None,
        )
    elif category == "runtime":
        report = domain.reinstall_runtime_dependencies()
    elif category == "dev":
        report = domain.reinstall_dev_dependencies()
    else:
        report = domain.reinstall_all_dependencies()

    _finish(report, as_json, echo_reinstall_report)
