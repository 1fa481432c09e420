"""
DAO Contract Harness - Fixture Controller

ContractEnvironment is the explicit handle on the shared contract state. The
contract tables are one mutable resource shared by every scenario, so each
scenario starts with ``reset()`` and the suite loads settings once.
"""

import logging
from typing import Iterable, List, Optional

from .accounts import AccountProvisioner, DaoAccounts
from .actions import DaoRegistry
from .config import HarnessConfig
from .contract import ContractSet
from .errors import EnvironmentMismatchError
from .models import ConfigParam, DaoRecord, TableQuery, TableSnapshot
from .rpc import ChainRPCClient
from .settings import resolve_params, set_params_value
from .transport import ActionTransport, CleosTransport

logger = logging.getLogger(__name__)


class ContractEnvironment:
    """
    Everything a scenario needs: config, accounts, contracts, RPC.

    Usage:
        env = ContractEnvironment.from_env()
        env.ensure_local_node()
        env.load_settings()
        env.reset()
        env.daoreg.create("dao.org1", env.accounts.daoreg, "HASH_1",
                          authorization=env.owner_auth)
    """

    def __init__(self, config: HarnessConfig,
                 rpc: Optional[ChainRPCClient] = None,
                 transport: Optional[ActionTransport] = None):
        self.config = config
        self.rpc = rpc or ChainRPCClient(config.node_url, timeout=config.timeout)
        self.transport = transport or CleosTransport(config)
        self.accounts = DaoAccounts.from_config(config)
        self.contracts = ContractSet.load(
            {"daoreg": self.accounts.daoreg, "daoinf": self.accounts.daoinf},
            self.transport,
        )
        self.daoreg = DaoRegistry(self.contracts.daoreg)
        self.provisioner = AccountProvisioner(self.transport, public_key=config.public_key)
        self._settings_loaded = False

    @classmethod
    def from_env(cls) -> "ContractEnvironment":
        return cls(HarnessConfig.from_env())

    @staticmethod
    def auth(account: str, permission: str = "active") -> str:
        return f"{account}@{permission}"

    @property
    def owner_auth(self) -> str:
        """Permission level of the registry contract itself."""
        return self.auth(self.accounts.daoreg)

    # =========================================================================
    # Guards
    # =========================================================================

    def ensure_local_node(self) -> None:
        """
        Refuse to run anywhere but a local test node.

        Raises:
            EnvironmentMismatchError: Environment name, host or chain id say
                this is not the local node
        """
        if not self.config.is_local_node():
            raise EnvironmentMismatchError(
                f"These scenarios only run on a local node "
                f"(environment={self.config.environment}, node={self.config.node_url})"
            )

        if self.config.chain_id:
            info = self.rpc.get_info()
            actual = info.get("chain_id")
            if actual != self.config.chain_id:
                raise EnvironmentMismatchError(
                    f"Chain id mismatch: expected {self.config.chain_id}, node reports {actual}"
                )
        logger.info(f"Local node confirmed at {self.config.node_url}")

    # =========================================================================
    # State control
    # =========================================================================

    def reset(self) -> None:
        """Erase every organization record. Succeeds on an empty table."""
        self.daoreg.reset(authorization=self.owner_auth)
        logger.debug("daos table reset")

    def reset_settings(self) -> None:
        """Erase every settings record."""
        self.daoreg.resetsttngs(authorization=self.owner_auth)
        logger.debug("config table reset")

    def load_settings(self, params: Optional[Iterable[ConfigParam]] = None,
                      force: bool = False) -> int:
        """
        Clear and reload settings, once per environment unless ``force``.

        Args:
            params: Params to apply (default: DEFAULT_PARAMS + params file)
            force: Reload even if already loaded

        Returns:
            Number of params applied (0 when skipped)
        """
        if self._settings_loaded and not force:
            logger.debug("Settings already loaded, skipping")
            return 0

        if params is None:
            params = resolve_params(self.config.params_file)

        self.reset_settings()
        count = set_params_value(self.contracts.daoreg, params, self.owner_auth)
        self._settings_loaded = True
        return count

    # =========================================================================
    # Table reads
    # =========================================================================

    def query(self, table: str, scope: Optional[str] = None,
              code: Optional[str] = None, limit: int = 100) -> TableQuery:
        """Query on a daoreg table; scope defaults to the contract account."""
        code = code or self.accounts.daoreg
        return TableQuery(code=code, scope=scope or code, table=table, limit=limit)

    def daos_query(self, limit: int = 100) -> TableQuery:
        return self.query("daos", limit=limit)

    def config_query(self, limit: int = 100) -> TableQuery:
        return self.query("config", limit=limit)

    def balances_query(self, limit: int = 100) -> TableQuery:
        return self.query("balances", limit=limit)

    def offers_query(self, dao_id: int, limit: int = 100) -> TableQuery:
        """Offers are scoped by dao id."""
        return self.query("offers", scope=str(dao_id), limit=limit)

    def read(self, query: TableQuery) -> TableSnapshot:
        return self.rpc.get_table_rows(query)

    def read_daos(self) -> List[DaoRecord]:
        return self.read(self.daos_query()).daos()

    def random_account(self, prefix: str = "") -> str:
        """Create a fresh account on chain and return its name."""
        return self.provisioner.create_random_account(prefix)

    def close(self):
        self.rpc.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
