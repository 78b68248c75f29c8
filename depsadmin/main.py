"""
package-deps-admin — CLI entrypoint.

Usage:
    depsadmin --help
    depsadmin status
    depsadmin install lodash --dev
    depsadmin reinstall --all
    depsadmin transit add ../my-lib
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import click

from depsadmin import __version__
from depsadmin.core.observability.logging_config import (
    LOG_FILE_ENV,
    LOG_FILE_LEVEL_ENV,
    resolve_level,
    setup_logging,
)
from depsadmin.core.services.commands import BACKENDS


@click.group()
@click.version_option(version=__version__, prog_name="depsadmin")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to depsadmin.yml (default: auto-detect).",
)
@click.option(
    "--root",
    "root",
    type=click.Path(file_okay=False),
    default=None,
    help="Package root containing package.json (default: current directory).",
)
@click.option("--mock", is_flag=True, help="Record package manager commands instead of running them.")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    root: str | None,
    mock: bool,
) -> None:
    """package-deps-admin — manage a package's dependencies with npm, yarn, pnpm or bun."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["root"] = root
    ctx.obj["mock"] = mock
    ctx.obj.setdefault("settings", None)
    ctx.obj.setdefault("adapter", None)

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(LOG_FILE_ENV),
        log_file_level=os.environ.get(LOG_FILE_LEVEL_ENV),
    )


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option(
    "--package-manager",
    "--pm",
    "package_manager",
    type=click.Choice(BACKENDS),
    default=None,
    help="Package manager (default: auto-detect).",
)
@click.pass_context
def status(ctx: click.Context, as_json: bool, package_manager: str | None) -> None:
    """Show the package, its backend and declared dependencies."""
    from depsadmin.core.errors import DepsAdminError
    from depsadmin.core.services.backend_detect import lock_files_present
    from depsadmin.core.services.commands import backend_spec
    from depsadmin.ui.cli.common import build_domain, echo_json, get_adapter

    try:
        domain = build_domain(ctx, package_manager=package_manager)
    except DepsAdminError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    result = {
        "name": domain.name,
        "version": domain.version,
        "root": str(domain.root),
        "manifest_found": domain.manifest_found,
        "backend": domain.backend,
        "backend_installed": get_adapter(ctx).is_available(backend_spec(domain.backend)["cli"]),
        "lock_files": lock_files_present(domain.root),
        "dependencies": {d.name: d.version for d in domain.runtime_dependencies},
        "devDependencies": {d.name: d.version for d in domain.dev_dependencies},
    }

    if as_json:
        echo_json(result)
        return

    if not domain.manifest_found:
        click.secho(f"⚠️  No package.json in {domain.root}", fg="yellow")

    click.secho(f"\n📦 {domain.name or domain.root.name}", fg="cyan", bold=True, nl=False)
    click.echo(f" {domain.version}" if domain.version else "")
    click.echo(f"   📁 {domain.root}")
    cli_icon = "✅" if result["backend_installed"] else "❌"
    click.echo(f"   {cli_icon} {domain.backend}")
    if result["lock_files"]:
        click.echo(f"   🔒 Lock: {', '.join(result['lock_files'])}")

    for title, deps in (
        ("Dependencies", domain.runtime_dependencies),
        ("Dev dependencies", domain.dev_dependencies),
    ):
        click.echo()
        click.secho(f"   {title}: {len(deps)}", fg="white", bold=True)
        for dep in deps:
            click.echo(f"     • {dep.name:<30} {dep.version}")

    click.echo()


# ── Register sub-groups ─────────────────────────────────────────

from depsadmin.ui.cli.deps import install, reinstall, uninstall  # noqa: E402
from depsadmin.ui.cli.transit import transit  # noqa: E402

cli.add_command(install)
cli.add_command(uninstall)
cli.add_command(reinstall)
cli.add_command(transit)


if __name__ == "__main__":
    cli()
