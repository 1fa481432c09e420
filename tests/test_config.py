"""
Tests for daoharness.config module

Tests cover:
- HarnessConfig creation from environment variables
- Default values
- Local node detection
- Configuration validation
"""

import sys
import os
from pathlib import Path
from unittest.mock import patch

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from daoharness.config import HarnessConfig, DEFAULT_PUBLIC_KEY, DEFAULT_USERS


class TestHarnessConfigCreation:
    """Test HarnessConfig creation and defaults."""

    def test_config_creation_with_defaults(self):
        """Defaults target a local node."""
        with patch.dict(os.environ, {}, clear=True):
            config = HarnessConfig.from_env()

            assert config.node_url == "http://127.0.0.1:8888"
            assert config.environment == "local"
            assert config.daoreg_account == "daoregistry1"
            assert config.daoinf_account == "daoinfo11111"
            assert config.users == DEFAULT_USERS
            assert config.chain_id is None
            assert config.cleos_path == "cleos"
            assert config.public_key == DEFAULT_PUBLIC_KEY
            assert config.timeout == 30.0
            assert config.params_file is None
            assert config.run_chain is False

    def test_config_from_env_overrides(self):
        """Test loading every setting from environment variables."""
        env = {
            "DAO_HARNESS_NODE_URL": "http://localhost:8889/",
            "DAO_HARNESS_ENVIRONMENT": "LOCAL",
            "DAO_HARNESS_CHAIN_ID": "abc123",
            "DAO_HARNESS_DAOREG_ACCOUNT": "registry",
            "DAO_HARNESS_DAOINF_ACCOUNT": "info",
            "DAO_HARNESS_USERS": "alice, bob,carol,dave ,",
            "DAO_HARNESS_CLEOS": "/opt/eosio/bin/cleos",
            "DAO_HARNESS_WALLET_URL": "http://127.0.0.1:8900",
            "DAO_HARNESS_TIMEOUT": "5",
            "DAO_HARNESS_PARAMS_FILE": "params.yaml",
            "DAO_HARNESS_RUN_CHAIN": "yes",
        }
        with patch.dict(os.environ, env, clear=True):
            config = HarnessConfig.from_env()

            assert config.node_url == "http://localhost:8889"
            assert config.environment == "local"
            assert config.chain_id == "abc123"
            assert config.daoreg_account == "registry"
            assert config.daoinf_account == "info"
            assert config.users == ["alice", "bob", "carol", "dave"]
            assert config.cleos_path == "/opt/eosio/bin/cleos"
            assert config.wallet_url == "http://127.0.0.1:8900"
            assert config.timeout == 5.0
            assert config.params_file == Path("params.yaml")
            assert config.run_chain is True

    def test_invalid_timeout_falls_back(self):
        """Test invalid timeout falls back to the default."""
        with patch.dict(os.environ, {"DAO_HARNESS_TIMEOUT": "soon"}, clear=True):
            assert HarnessConfig.from_env().timeout == 30.0

    def test_str_lists_endpoints(self):
        """Test string form lists node and accounts."""
        with patch.dict(os.environ, {}, clear=True):
            text = str(HarnessConfig.from_env())
        assert "node_url=http://127.0.0.1:8888" in text
        assert "daoreg=daoregistry1" in text


class TestLocalNodeDetection:
    """Test is_local_node()."""

    @pytest.mark.parametrize("url", [
        "http://127.0.0.1:8888",
        "http://localhost:8888",
        "http://0.0.0.0:8888",
    ])
    def test_local_hosts(self, url):
        """Test loopback hosts count as local."""
        with patch.dict(os.environ, {"DAO_HARNESS_NODE_URL": url}, clear=True):
            assert HarnessConfig.from_env().is_local_node() is True

    def test_remote_host_is_not_local(self):
        """Test remote host is rejected."""
        with patch.dict(os.environ, {"DAO_HARNESS_NODE_URL": "https://testnet.example.io"}, clear=True):
            assert HarnessConfig.from_env().is_local_node() is False

    def test_non_local_environment_is_not_local(self):
        """Test environment other than local is rejected."""
        with patch.dict(os.environ, {"DAO_HARNESS_ENVIRONMENT": "testnet"}, clear=True):
            assert HarnessConfig.from_env().is_local_node() is False


class TestHarnessConfigValidation:
    """Test validate()."""

    def test_defaults_are_valid(self):
        """Test default configuration validates."""
        with patch.dict(os.environ, {}, clear=True):
            is_valid, errors = HarnessConfig.from_env().validate()
        assert is_valid is True
        assert errors == []

    def test_bad_url(self):
        """Test node URL without http scheme."""
        with patch.dict(os.environ, {"DAO_HARNESS_NODE_URL": "ftp://node"}, clear=True):
            is_valid, errors = HarnessConfig.from_env().validate()
        assert is_valid is False
        assert any("DAO_HARNESS_NODE_URL" in e for e in errors)

    def test_too_few_users(self):
        """Test fewer than four users."""
        with patch.dict(os.environ, {"DAO_HARNESS_USERS": "alice,bob"}, clear=True):
            is_valid, errors = HarnessConfig.from_env().validate()
        assert is_valid is False
        assert any("at least 4 accounts" in e for e in errors)

    def test_invalid_account_name(self):
        """Test invalid account name reported."""
        with patch.dict(os.environ, {"DAO_HARNESS_DAOREG_ACCOUNT": "DaoRegistry"}, clear=True):
            is_valid, errors = HarnessConfig.from_env().validate()
        assert is_valid is False
        assert "Invalid account name: 'DaoRegistry'" in errors

    def test_missing_params_file(self, tmp_path):
        """Test params file that does not exist."""
        missing = tmp_path / "nope.yaml"
        with patch.dict(os.environ, {"DAO_HARNESS_PARAMS_FILE": str(missing)}, clear=True):
            is_valid, errors = HarnessConfig.from_env().validate()
        assert is_valid is False
        assert any("does not exist" in e for e in errors)
