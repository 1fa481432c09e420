"""
DAO Contract Harness - Configuration

Configuration loading from environment variables. Every setting has a default
that targets a local development node.
"""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

DEFAULT_NODE_URL = "http://127.0.0.1:8888"
DEFAULT_USERS = ["testuseraaa", "testuserbbb", "testuserccc", "testuserddd"]

# Development key shipped with the reference EOSIO node images
DEFAULT_PUBLIC_KEY = "EOS6MRyAjQq8ud7hVNYcfnVPJqcVpscN5So8BhtHuGYqET5GDW5CV"

LOCAL_ENVIRONMENT = "local"
LOCAL_HOSTS = ("127.0.0.1", "localhost", "0.0.0.0", "::1")


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes", "on")


@dataclass
class HarnessConfig:
    """
    Configuration for the contract harness.

    Loaded from environment variables so the same scenarios can point at any
    local node without code changes.
    """

    # Node RPC endpoint
    node_url: str

    # Deployment environment name ("local" is the only one scenarios accept)
    environment: str

    # Contract accounts
    daoreg_account: str
    daoinf_account: str

    # Ordinary test identities (first..fourth user)
    users: List[str] = field(default_factory=lambda: list(DEFAULT_USERS))

    # Expected chain id; checked against get_info when set
    chain_id: Optional[str] = None

    # Action transport (cleos + wallet)
    cleos_path: str = "cleos"
    wallet_url: Optional[str] = None
    public_key: str = DEFAULT_PUBLIC_KEY

    # Transport timeout in seconds
    timeout: float = 30.0

    # Optional YAML file with contract settings parameters
    params_file: Optional[Path] = None

    # Chain scenarios are opt-in
    run_chain: bool = False

    @classmethod
    def from_env(cls) -> "HarnessConfig":
        """
        Load configuration from environment variables.

        Environment variables:
            DAO_HARNESS_NODE_URL: Node RPC URL (default: http://127.0.0.1:8888)
            DAO_HARNESS_ENVIRONMENT: Environment name (default: local)
            DAO_HARNESS_CHAIN_ID: Expected chain id (optional)
            DAO_HARNESS_DAOREG_ACCOUNT: DAO registry contract account
            DAO_HARNESS_DAOINF_ACCOUNT: DAO info contract account
            DAO_HARNESS_USERS: Comma separated test user accounts
            DAO_HARNESS_CLEOS: Path to the cleos binary
            DAO_HARNESS_WALLET_URL: keosd URL used by cleos (optional)
            DAO_HARNESS_PUBLIC_KEY: Owner/active key for new random accounts
            DAO_HARNESS_TIMEOUT: Transport timeout in seconds
            DAO_HARNESS_PARAMS_FILE: YAML file with settings parameters
            DAO_HARNESS_RUN_CHAIN: Enable chain scenarios (true/false)

        Returns:
            HarnessConfig: Configuration instance
        """
        users_str = os.getenv("DAO_HARNESS_USERS")
        if users_str:
            users = [u.strip() for u in users_str.split(",") if u.strip()]
        else:
            users = list(DEFAULT_USERS)

        params_file_str = os.getenv("DAO_HARNESS_PARAMS_FILE")
        params_file = Path(params_file_str) if params_file_str else None

        timeout_str = os.getenv("DAO_HARNESS_TIMEOUT", "30")
        try:
            timeout = float(timeout_str)
        except ValueError:
            logger.warning(f"Invalid DAO_HARNESS_TIMEOUT={timeout_str!r}, using 30")
            timeout = 30.0

        config = cls(
            node_url=os.getenv("DAO_HARNESS_NODE_URL", DEFAULT_NODE_URL).rstrip("/"),
            environment=os.getenv("DAO_HARNESS_ENVIRONMENT", LOCAL_ENVIRONMENT).lower(),
            daoreg_account=os.getenv("DAO_HARNESS_DAOREG_ACCOUNT", "daoregistry1"),
            daoinf_account=os.getenv("DAO_HARNESS_DAOINF_ACCOUNT", "daoinfo11111"),
            users=users,
            chain_id=os.getenv("DAO_HARNESS_CHAIN_ID") or None,
            cleos_path=os.getenv("DAO_HARNESS_CLEOS", "cleos"),
            wallet_url=os.getenv("DAO_HARNESS_WALLET_URL") or None,
            public_key=os.getenv("DAO_HARNESS_PUBLIC_KEY", DEFAULT_PUBLIC_KEY),
            timeout=timeout,
            params_file=params_file,
            run_chain=_env_flag("DAO_HARNESS_RUN_CHAIN"),
        )
        logger.debug(f"Loaded {config}")
        return config

    def is_local_node(self) -> bool:
        """
        Check that the harness targets a local test node.

        Both the environment name and the node host must say "local".
        """
        if self.environment != LOCAL_ENVIRONMENT:
            return False
        host = urlparse(self.node_url).hostname
        return host in LOCAL_HOSTS

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate configuration.

        Returns:
            Tuple of (is_valid: bool, errors: list[str])
        """
        errors = []

        parsed = urlparse(self.node_url)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            errors.append(
                f"DAO_HARNESS_NODE_URL must be an http(s) URL, got {self.node_url!r}"
            )

        if len(self.users) < 4:
            errors.append(
                f"DAO_HARNESS_USERS needs at least 4 accounts, got {len(self.users)}"
            )

        # Imported here to keep config importable without the accounts module
        from .accounts import is_valid_account_name

        for account in [self.daoreg_account, self.daoinf_account, *self.users]:
            if not is_valid_account_name(account):
                errors.append(f"Invalid account name: {account!r}")

        if self.timeout <= 0:
            errors.append(f"DAO_HARNESS_TIMEOUT must be positive, got {self.timeout}")

        if self.params_file is not None and not self.params_file.exists():
            errors.append(f"Settings params file does not exist: {self.params_file}")

        is_valid = len(errors) == 0
        return is_valid, errors

    def __str__(self) -> str:
        return (
            f"HarnessConfig("
            f"node_url={self.node_url}, "
            f"environment={self.environment}, "
            f"chain_id={self.chain_id}, "
            f"daoreg={self.daoreg_account}, "
            f"daoinf={self.daoinf_account}, "
            f"users={','.join(self.users)}, "
            f"cleos={self.cleos_path}, "
            f"run_chain={self.run_chain})"
        )
