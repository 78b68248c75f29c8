"""
Tests for the adapter contract, mock, and shell adapters.
"""

import subprocess
from unittest.mock import MagicMock, patch

from depsadmin.adapters.base import ExecutionContext
from depsadmin.adapters.mock import MockAdapter
from depsadmin.adapters.shell.command import ShellCommandAdapter
from depsadmin.core.models.action import Receipt

RUN = "depsadmin.adapters.shell.command.subprocess.run"
WHICH = "depsadmin.adapters.shell.command.shutil.which"


# ── Protocol Tests ───────────────────────────────────────────────────


class TestExecutionContext:
    def test_executable(self):
        ctx = ExecutionContext(action_id="runtime", command=["npm", "install", "a"])
        assert ctx.executable == "npm"

    def test_empty_command(self):
        assert ExecutionContext(action_id="runtime").executable == ""


class TestReceipt:
    def test_success(self):
        receipt = Receipt.success(adapter="shell", action_id="dev", command=["yarn", "add", "--dev", "jest"])
        assert receipt.ok
        assert not receipt.failed
        assert receipt.command_line == "yarn add --dev jest"

    def test_failure(self):
        receipt = Receipt.failure(adapter="shell", action_id="dev", error="boom", return_code=1)
        assert receipt.failed
        assert receipt.error == "boom"
        assert receipt.return_code == 1

    def test_from_process_failure(self):
        completed = subprocess.CompletedProcess(["pnpm", "remove", "a"], 1, "", "ERR_PNPM_NO_IMPORTER\n")
        receipt = Receipt.from_process("shell", "uninstall", ["pnpm", "remove", "a"], completed, duration_ms=12)
        assert receipt.failed
        assert receipt.error == "ERR_PNPM_NO_IMPORTER"
        assert receipt.stderr == "ERR_PNPM_NO_IMPORTER"
        assert receipt.duration_ms == 12


# ── Mock Adapter Tests ───────────────────────────────────────────────


class TestMockAdapter:
    def test_default_success(self):
        mock = MockAdapter(adapter_name="test-mock")
        receipt = mock.run(ExecutionContext(action_id="runtime", command=["npm", "install", "a"]))
        assert receipt.ok
        assert receipt.adapter == "test-mock"
        assert receipt.command == ["npm", "install", "a"]
        assert mock.call_count == 1

    def test_set_failure(self):
        mock = MockAdapter()
        mock.set_failure("uninstall", error="Intentional failure", return_code=7)
        receipt = mock.run(ExecutionContext(action_id="uninstall", command=["npm", "uninstall", "a"]))
        assert receipt.failed
        assert receipt.error == "Intentional failure"
        assert receipt.return_code == 7
        assert receipt.command == ["npm", "uninstall", "a"]

    def test_failure_scoped_to_action_id(self):
        mock = MockAdapter()
        mock.set_failure("dev")
        assert mock.run(ExecutionContext(action_id="runtime", command=["npm", "install", "a"])).ok

    def test_commands_in_order(self):
        mock = MockAdapter()
        for name in ("a", "b"):
            mock.run(ExecutionContext(action_id="runtime", command=["npm", "install", name]))
        assert mock.commands == [["npm", "install", "a"], ["npm", "install", "b"]]

    def test_validation_failure_not_recorded(self):
        mock = MockAdapter()
        receipt = mock.run(ExecutionContext(action_id="runtime"))
        assert receipt.failed
        assert "Empty command" in receipt.error
        assert mock.call_count == 0

    def test_reset(self):
        mock = MockAdapter()
        mock.set_failure("runtime")
        mock.run(ExecutionContext(action_id="runtime", command=["npm", "install", "a"]))
        mock.reset()
        assert mock.call_count == 0
        assert mock.run(ExecutionContext(action_id="runtime", command=["npm", "install", "a"])).ok

    def test_is_available(self):
        assert MockAdapter(available=True).is_available("npm")
        assert not MockAdapter(available=False).is_available("npm")


# ── Shell Adapter Tests ──────────────────────────────────────────────


class TestShellCommandAdapter:
    def test_name(self):
        assert ShellCommandAdapter().name == "shell"

    def test_is_available(self):
        with patch(WHICH, return_value="/usr/bin/pnpm") as which:
            assert ShellCommandAdapter().is_available("pnpm")
        which.assert_called_once_with("pnpm")
        with patch(WHICH, return_value=None):
            assert not ShellCommandAdapter().is_available("pnpm")

    def test_success(self, tmp_path):
        completed = MagicMock(returncode=0, stdout="added 1 package\n", stderr="npm WARN deprecated\n")
        ctx = ExecutionContext(action_id="runtime", command=["npm", "install", "a"], cwd=str(tmp_path))

        with patch(RUN, return_value=completed) as run:
            receipt = ShellCommandAdapter().run(ctx)

        run.assert_called_once_with(
            ["npm", "install", "a"],
            cwd=str(tmp_path),
            capture_output=True,
            text=True,
        )
        assert receipt.ok
        assert receipt.stdout == "added 1 package"
        assert receipt.stderr == "npm WARN deprecated"
        assert receipt.return_code == 0

    def test_non_zero_exit(self, tmp_path):
        completed = MagicMock(returncode=1, stdout="", stderr="npm ERR! code ERESOLVE\n")
        ctx = ExecutionContext(action_id="dev", command=["npm", "install", "--save-dev", "a"], cwd=str(tmp_path))

        with patch(RUN, return_value=completed):
            receipt = ShellCommandAdapter().run(ctx)

        assert receipt.failed
        assert receipt.error == "npm ERR! code ERESOLVE"
        assert receipt.return_code == 1
        assert receipt.command == ["npm", "install", "--save-dev", "a"]

    def test_non_zero_exit_without_stderr(self):
        completed = MagicMock(returncode=2, stdout="", stderr="")
        with patch(RUN, return_value=completed):
            receipt = ShellCommandAdapter().run(ExecutionContext(action_id="global", command=["bun", "install", "-g", "a"]))
        assert receipt.error == "Command exited with code 2"

    def test_spawn_error(self):
        with patch(RUN, side_effect=FileNotFoundError("No such file: 'yarn'")):
            receipt = ShellCommandAdapter().run(ExecutionContext(action_id="runtime", command=["yarn", "add", "a"]))
        assert receipt.failed
        assert "Command execution error" in receipt.error

    def test_missing_cwd(self, tmp_path):
        ctx = ExecutionContext(action_id="runtime", command=["npm", "install", "a"], cwd=str(tmp_path / "gone"))
        with patch(RUN) as run:
            receipt = ShellCommandAdapter().run(ctx)
        run.assert_not_called()
        assert receipt.failed
        assert "Working directory does not exist" in receipt.error

    def test_empty_command(self):
        with patch(RUN) as run:
            receipt = ShellCommandAdapter().run(ExecutionContext(action_id="runtime"))
        run.assert_not_called()
        assert "Empty command" in receipt.error
