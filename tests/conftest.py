"""
Pytest configuration for the harness tests.

Unit tests run offline against FakeTransport and mocked RPC clients.
Chain scenarios under tests/integration/ need a local node and --run-chain.
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Sequence
from unittest.mock import MagicMock

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from daoharness.config import HarnessConfig
from daoharness.errors import ActionError
from daoharness.models import TableSnapshot
from daoharness.rpc import ChainRPCClient
from daoharness.transport import ActionTransport

pytest_plugins = ["daoharness.pytest_plugin", "pytester"]


class FakeTransport(ActionTransport):
    """
    Records pushed actions and answers from a script.

    ``fail(action, message)`` makes the next push of ``action`` raise
    ActionError(message); unscripted pushes succeed.
    """

    def __init__(self, config: HarnessConfig):
        self.config = config
        self.calls: List[Dict[str, Any]] = []
        self.accounts: List[str] = []
        self._failures: Dict[str, List[str]] = {}

    def fail(self, action: str, message: str, times: int = 1):
        self._failures.setdefault(action, []).extend([message] * times)

    def push_action(self, contract: str, action: str, params: Sequence[Any],
                    authorization: List[str]) -> Dict[str, Any]:
        self.calls.append({
            "contract": contract,
            "action": action,
            "params": list(params),
            "authorization": list(authorization),
        })
        pending = self._failures.get(action)
        if pending:
            raise ActionError(pending.pop(0))
        return {"transaction_id": f"tx{len(self.calls)}"}

    def create_account(self, creator: str, name: str, public_key: str) -> Dict[str, Any]:
        self.accounts.append(name)
        return {"transaction_id": f"newaccount-{name}"}

    def actions(self) -> List[str]:
        return [c["action"] for c in self.calls]


def make_config(**overrides) -> HarnessConfig:
    """Local-node config with defaults; any field can be overridden."""
    values = dict(
        node_url="http://127.0.0.1:8888",
        environment="local",
        daoreg_account="daoregistry1",
        daoinf_account="daoinfo11111",
        users=["testuseraaa", "testuserbbb", "testuserccc", "testuserddd"],
    )
    values.update(overrides)
    return HarnessConfig(**values)


@pytest.fixture
def config() -> HarnessConfig:
    return make_config()


@pytest.fixture
def transport(config) -> FakeTransport:
    return FakeTransport(config)


@pytest.fixture
def rpc() -> MagicMock:
    """ChainRPCClient mock returning an empty snapshot by default."""
    mock_rpc = MagicMock(spec=ChainRPCClient)
    mock_rpc.get_table_rows.return_value = TableSnapshot(rows=[])
    mock_rpc.get_info.return_value = {"chain_id": "cf057bbfb726", "head_block_num": 10}
    return mock_rpc
