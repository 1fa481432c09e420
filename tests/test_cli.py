"""
Tests for daoharness.cli module
"""

import sys
from pathlib import Path
from unittest.mock import patch

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from daoharness import cli


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("DAO_HARNESS_NODE_URL", "DAO_HARNESS_ENVIRONMENT",
                 "DAO_HARNESS_PARAMS_FILE", "DAO_HARNESS_USERS"):
        monkeypatch.delenv(name, raising=False)


class TestCheck:
    """Test the check command."""

    def test_invalid_config(self, capsys):
        """Test check fails on invalid configuration."""
        assert cli.main(["--node-url", "ftp://127.0.0.1:8888", "check"]) == 1
        assert "[FAIL] Configuration validation failed" in capsys.readouterr().out

    def test_not_local_node(self, capsys):
        """Test check fails off the local node."""
        assert cli.main(["--environment", "testnet", "check"]) == 1

        out = capsys.readouterr().out
        assert "[OK]" in out
        assert "[FAIL]" in out
        assert "local node" in out


class TestRun:
    """Test the run command hands off to pytest."""

    def test_default_scenarios(self):
        """Test run defaults to the integration scenarios."""
        with patch("pytest.main", return_value=0) as pytest_main:
            assert cli.main(["run"]) == 0

        pytest_main.assert_called_once_with(
            ["-p", "daoharness.pytest_plugin", "--run-chain", cli.DEFAULT_SCENARIOS]
        )

    def test_passes_pytest_args(self):
        """Test extra arguments handed to pytest."""
        with patch("pytest.main", return_value=1) as pytest_main:
            assert cli.main(["run", "--", "-k", "create"]) == 1

        args = pytest_main.call_args[0][0]
        assert args[:3] == ["-p", "daoharness.pytest_plugin", "--run-chain"]
        assert args[3:5] == ["-k", "create"]
        assert args[-1] == cli.DEFAULT_SCENARIOS

    def test_explicit_path_kept(self, tmp_path):
        """Test explicit scenario path replaces the default."""
        scenario = tmp_path / "test_scenario.py"
        scenario.write_text("")

        with patch("pytest.main", return_value=0) as pytest_main:
            cli.run([f"{scenario}::test_create"])

        args = pytest_main.call_args[0][0]
        assert args[-1] == f"{scenario}::test_create"
        assert cli.DEFAULT_SCENARIOS not in args

    def test_environment_override(self, monkeypatch):
        """Test command line flag wins over the environment."""
        import os

        with patch("pytest.main", return_value=0):
            cli.main(["--environment", "local", "run"])

        assert os.environ["DAO_HARNESS_ENVIRONMENT"] == "local"
