"""
Command synthesis — backend + category + references → argument list.

Pure functions, no I/O. Commands are argument lists for
``subprocess.run`` (never shell strings), so dependency names are never
re-parsed by a shell.

    build_install_command("yarn", "dev", ["left-pad"])
    → ["yarn", "add", "--dev", "left-pad"]
"""

from __future__ import annotations

import logging
import re
import shlex
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from depsadmin.core.errors import BackendUnavailable
from depsadmin.core.services.deps_util import RefLike, ref_names, render_refs

logger = logging.getLogger(__name__)


# ── Backend definitions ─────────────────────────────────────────


_BACKENDS: dict[str, dict] = {
    "npm": {
        "cli": "npm",
        "install": "install",
        "dev_flag": "--save-dev",
        "global_flag": "-g",
        "uninstall": "uninstall",
        "lock_files": ["package-lock.json", "npm-shrinkwrap.json"],
    },
    "yarn": {
        "cli": "yarn",
        "install": "add",
        "dev_flag": "--dev",
        "global_flag": "global",
        "uninstall": "remove",
        "lock_files": ["yarn.lock"],
    },
    "pnpm": {
        "cli": "pnpm",
        "install": "add",
        "dev_flag": "--save-dev",
        "global_flag": "-g",
        "uninstall": "remove",
        "lock_files": ["pnpm-lock.yaml"],
    },
    "bun": {
        "cli": "bun",
        "install": "install",
        "dev_flag": "--development",
        "global_flag": "-g",
        "uninstall": "remove",
        "lock_files": ["bun.lockb", "bun.lock"],
    },
}

BACKENDS: tuple[str, ...] = tuple(_BACKENDS)
DEFAULT_BACKEND = "npm"

CATEGORIES: tuple[str, ...] = ("runtime", "dev", "global")

# one or two leading dashes, then something that is not a dash
_FLAG_RE = re.compile(r"^--?[^-]")


@dataclass
class CommandOptions:
    """Modifiers applied to a synthesized command."""

    use_force: bool = False
    use_legacy_peer_deps: bool = False
    version_specific: bool = False
    extra_flags: list[str] = field(default_factory=list)


def backend_spec(backend: str) -> dict:
    """Look up a backend definition.

    Raises:
        BackendUnavailable: If the backend is not one of BACKENDS.
    """
    spec = _BACKENDS.get(backend)
    if spec is None:
        raise BackendUnavailable(
            backend,
            f"Unsupported package manager: {backend!r}. Supported: {', '.join(BACKENDS)}",
        )
    return spec


def valid_flags(flags: Iterable[str]) -> list[str]:
    """Keep only entries that look like ``-x`` / ``--xyz``."""
    kept = []
    for flag in flags:
        if _FLAG_RE.match(flag or ""):
            kept.append(flag)
        else:
            logger.debug("Dropping malformed flag %r", flag)
    return kept


def _trailing_flags(backend: str, options: CommandOptions, *, installing: bool) -> list[str]:
    flags: list[str] = []
    if installing and options.use_force:
        flags.append("--force")
    if options.use_legacy_peer_deps and backend == "npm":
        flags.append("--legacy-peer-deps")
    for flag in valid_flags(options.extra_flags):
        if flag not in flags:
            flags.append(flag)
    return flags


def build_install_command(
    backend: str,
    category: str,
    dependencies: Sequence[RefLike],
    options: CommandOptions | None = None,
) -> list[str]:
    """Synthesize the install command for one category.

    Args:
        backend: npm, yarn, pnpm or bun.
        category: runtime, dev or global.
        dependencies: References to install.
        options: Force / legacy-peer-deps / version pinning / extra flags.

    Returns:
        Argument list, e.g. ``["npm", "install", "--save-dev", "jest"]``.
    """
    options = options or CommandOptions()
    spec = backend_spec(backend)
    refs = render_refs(dependencies, options.version_specific)

    if category == "runtime":
        argv = [spec["cli"], spec["install"]]
    elif category == "dev":
        argv = [spec["cli"], spec["install"], spec["dev_flag"]]
    elif category == "global":
        if backend == "yarn":
            # yarn's global mode is a sub-command: `yarn global add <pkg>`
            argv = [spec["cli"], spec["global_flag"], spec["install"]]
        else:
            argv = [spec["cli"], spec["install"], spec["global_flag"]]
    else:
        raise ValueError(f"Unknown dependency category: {category!r}")

    return [*argv, *refs, *_trailing_flags(backend, options, installing=True)]


def build_uninstall_command(
    backend: str,
    dependencies: Sequence[RefLike],
    options: CommandOptions | None = None,
) -> list[str]:
    """Synthesize a single batched uninstall command (names only)."""
    options = options or CommandOptions()
    spec = backend_spec(backend)
    return [
        spec["cli"],
        spec["uninstall"],
        *ref_names(dependencies),
        *_trailing_flags(backend, options, installing=False),
    ]


def format_command(argv: Sequence[str]) -> str:
    """Render an argument list as a copy-pasteable command line."""
    return shlex.join(argv)
