"""
Tests for command synthesis — verbs, category flags, trailing flags.
"""

import pytest

from depsadmin.core.errors import BackendUnavailable
from depsadmin.core.models.dependency import Dependency, NamedRef
from depsadmin.core.services.commands import (
    BACKENDS,
    CommandOptions,
    build_install_command,
    build_uninstall_command,
    format_command,
    valid_flags,
)

# ── Install ─────────────────────────────────────────────────────────


class TestInstallCommand:
    @pytest.mark.parametrize(
        "backend,expected",
        [
            ("npm", ["npm", "install", "left-pad"]),
            ("yarn", ["yarn", "add", "left-pad"]),
            ("pnpm", ["pnpm", "add", "left-pad"]),
            ("bun", ["bun", "install", "left-pad"]),
        ],
    )
    def test_runtime(self, backend, expected):
        assert build_install_command(backend, "runtime", ["left-pad"]) == expected

    @pytest.mark.parametrize(
        "backend,expected",
        [
            ("npm", ["npm", "install", "--save-dev", "jest"]),
            ("yarn", ["yarn", "add", "--dev", "jest"]),
            ("pnpm", ["pnpm", "add", "--save-dev", "jest"]),
            ("bun", ["bun", "install", "--development", "jest"]),
        ],
    )
    def test_dev(self, backend, expected):
        assert build_install_command(backend, "dev", ["jest"]) == expected

    @pytest.mark.parametrize(
        "backend,expected",
        [
            ("npm", ["npm", "install", "-g", "typescript"]),
            ("yarn", ["yarn", "global", "add", "typescript"]),
            ("pnpm", ["pnpm", "add", "-g", "typescript"]),
            ("bun", ["bun", "install", "-g", "typescript"]),
        ],
    )
    def test_global(self, backend, expected):
        assert build_install_command(backend, "global", ["typescript"]) == expected

    def test_references_keep_order(self):
        cmd = build_install_command("npm", "runtime", ["b", "a", "c"])
        assert cmd == ["npm", "install", "b", "a", "c"]

    def test_force_appended_once_at_end(self):
        options = CommandOptions(use_force=True, extra_flags=["--force", "--ignore-scripts"])
        cmd = build_install_command("npm", "runtime", ["a"], options)
        assert cmd.count("--force") == 1
        assert cmd == ["npm", "install", "a", "--force", "--ignore-scripts"]

    def test_legacy_peer_deps_npm_only(self):
        options = CommandOptions(use_legacy_peer_deps=True)
        assert build_install_command("npm", "runtime", ["a"], options)[-1] == "--legacy-peer-deps"
        for backend in ("yarn", "pnpm", "bun"):
            assert "--legacy-peer-deps" not in build_install_command(backend, "runtime", ["a"], options)

    def test_flag_order(self):
        options = CommandOptions(
            use_force=True,
            use_legacy_peer_deps=True,
            extra_flags=["--no-audit"],
        )
        cmd = build_install_command("npm", "dev", ["a"], options)
        assert cmd == ["npm", "install", "--save-dev", "a", "--force", "--legacy-peer-deps", "--no-audit"]

    def test_version_specific_pins_dependencies_only(self):
        refs = [Dependency(name="a", version="^1.0.0"), NamedRef(name="b"), "left-pad@1.3.0"]
        options = CommandOptions(version_specific=True)
        cmd = build_install_command("npm", "runtime", refs, options)
        assert cmd == ["npm", "install", "a@^1.0.0", "b", "left-pad@1.3.0"]

    def test_not_version_specific_renders_names(self):
        cmd = build_install_command("npm", "runtime", [Dependency(name="a", version="^1.0.0")])
        assert cmd == ["npm", "install", "a"]

    def test_scoped_name_not_split(self):
        cmd = build_install_command("pnpm", "runtime", ["@scope/pkg@2.0.0"])
        assert cmd == ["pnpm", "add", "@scope/pkg@2.0.0"]

    def test_unknown_category(self):
        with pytest.raises(ValueError, match="Unknown dependency category"):
            build_install_command("npm", "optional", ["a"])

    def test_unknown_backend(self):
        with pytest.raises(BackendUnavailable, match="Unsupported package manager"):
            build_install_command("cargo", "runtime", ["a"])

    def test_all_backends_supported(self):
        assert BACKENDS == ("npm", "yarn", "pnpm", "bun")


# ── Uninstall ───────────────────────────────────────────────────────


class TestUninstallCommand:
    @pytest.mark.parametrize(
        "backend,verb",
        [("npm", "uninstall"), ("yarn", "remove"), ("pnpm", "remove"), ("bun", "remove")],
    )
    def test_verbs(self, backend, verb):
        assert build_uninstall_command(backend, ["a", "b"]) == [backend, verb, "a", "b"]

    def test_names_only(self):
        options = CommandOptions(version_specific=True)
        cmd = build_uninstall_command("npm", [Dependency(name="a", version="^1.0.0")], options)
        assert cmd == ["npm", "uninstall", "a"]

    def test_no_force(self):
        cmd = build_uninstall_command("npm", ["a"], CommandOptions(use_force=True))
        assert "--force" not in cmd

    def test_legacy_peer_deps_kept_for_npm(self):
        cmd = build_uninstall_command("npm", ["a"], CommandOptions(use_legacy_peer_deps=True))
        assert cmd == ["npm", "uninstall", "a", "--legacy-peer-deps"]


# ── Flags & formatting ──────────────────────────────────────────────


class TestFlags:
    def test_valid_flags_filter(self):
        flags = ["--ignore-scripts", "-E", "---bad", "plain", "--", "-", ""]
        assert valid_flags(flags) == ["--ignore-scripts", "-E"]

    def test_extra_flags_deduplicated(self):
        options = CommandOptions(extra_flags=["--no-audit", "--no-audit"])
        assert build_install_command("npm", "runtime", ["a"], options) == ["npm", "install", "a", "--no-audit"]

    def test_format_command_quotes(self):
        assert format_command(["npm", "install", "a b"]) == "npm install 'a b'"
