"""
CLI commands for transiting dependencies between packages.

Thin wrappers over ``depsadmin.core.services.transit_ops``.
"""

from __future__ import annotations

import sys

import click

from depsadmin.core.services.commands import BACKENDS
from depsadmin.ui.cli.common import (
    build_domain,
    echo_install_report,
    echo_json,
    echo_uninstall_report,
    handle_errors,
    open_store,
    resolve_root,
)


@click.group()
def transit() -> None:
    """Transit — share a local package's dependencies with this one."""


_SOURCE_ARG = click.argument("source_dir", type=click.Path(exists=True, file_okay=False))
_PM_OPTION = click.option(
    "--package-manager",
    "--pm",
    "package_manager",
    type=click.Choice(BACKENDS),
    default=None,
    help="Package manager of this package (default: auto-detect).",
)
_JSON_OPTION = click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")


@transit.command("add")
@_SOURCE_ARG
@_PM_OPTION
@_JSON_OPTION
@click.pass_context
@handle_errors
def add(ctx: click.Context, source_dir: str, package_manager: str | None, as_json: bool) -> None:
    """Install SOURCE_DIR's missing dependencies here and record them."""
    from depsadmin.core.services.transit_ops import transit_dependencies

    source = build_domain(ctx, source_dir)
    dest = build_domain(ctx, package_manager=package_manager)
    result = transit_dependencies(source, dest, store=open_store(ctx))

    if as_json:
        echo_json(result.to_dict())
    else:
        link = result.link
        click.secho(f"🔗 {link.id}", fg="cyan", bold=True)
        if link.transited_dependencies.empty:
            click.secho("   ✅ Nothing to transit, every dependency is already present", fg="green")
        else:
            echo_install_report(result.install, title="Transit")

    if not result.ok:
        sys.exit(1)


@transit.command("remove")
@_SOURCE_ARG
@_PM_OPTION
@_JSON_OPTION
@click.pass_context
@handle_errors
def remove(ctx: click.Context, source_dir: str, package_manager: str | None, as_json: bool) -> None:
    """Remove what an earlier `transit add SOURCE_DIR` installed here."""
    from depsadmin.core.services.transit_ops import remove_transit_dependencies

    source = build_domain(ctx, source_dir)
    dest = build_domain(ctx, package_manager=package_manager)
    report = remove_transit_dependencies(source, dest, store=open_store(ctx))

    if report is None:
        if as_json:
            echo_json({"status": "no_link"})
        else:
            click.secho(
                f"⚠️  No transit link from {source.name or source.root} to {dest.name or dest.root}",
                fg="yellow",
            )
        return

    if as_json:
        echo_json(report.to_dict())
    else:
        echo_uninstall_report(report, title="Transit removal")

    if not report.ok:
        sys.exit(1)


@transit.command("list")
@_JSON_OPTION
@click.option("--here", is_flag=True, help="Only links whose destination is the current root.")
@click.pass_context
@handle_errors
def list_links(ctx: click.Context, as_json: bool, here: bool) -> None:
    """Show recorded transit links."""
    links = open_store(ctx).get_links()
    if here:
        root = str(resolve_root(ctx))
        links = [link for link in links if link.dest.root == root]

    if as_json:
        echo_json({"links": [link.model_dump(mode="json") for link in links]})
        return

    if not links:
        click.secho("No transit links recorded", fg="yellow")
        return

    click.secho(f"🔗 Transit links ({len(links)}):", fg="cyan", bold=True)
    for link in links:
        deps = link.transited_dependencies
        click.echo(f"   • {link.id}")
        click.echo(f"     {link.source.root} → {link.dest.root} ({link.dest.backend})")
        if deps.runtime:
            click.echo(f"     runtime: {' '.join(deps.runtime)}")
        if deps.dev:
            click.echo(f"     dev:     {' '.join(deps.dev)}")
    click.echo()
