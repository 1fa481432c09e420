"""
Pytest plugin: suite runner for contract scenarios.

- ``chain`` marker: scenario talks to a live node (opt-in with --run-chain
  or DAO_HARNESS_RUN_CHAIN=true, skipped otherwise)
- ``unverified`` marker: scenario logs table state without asserting it;
  listed in the terminal summary
- ``dao_env`` session fixture: builds the ContractEnvironment, aborts the run
  with exit code 1 when not on the local node, loads settings once
- every ``chain`` scenario gets a contract reset before it runs
"""

import json
import logging
from typing import Any, List, Optional, Union

import pytest

from .accounts import DaoAccounts
from .actions import DaoRegistry
from .config import HarnessConfig
from .contract import ContractSet
from .environment import ContractEnvironment
from .errors import EnvironmentMismatchError
from .logger import configure_logging
from .models import TableSnapshot

logger = logging.getLogger(__name__)

RUN_CHAIN_OPTION = "--run-chain"

unverified_key = pytest.StashKey[List[str]]()


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_addoption(parser):
    group = parser.getgroup("daoharness", "DAO contract harness")
    group.addoption(
        RUN_CHAIN_OPTION,
        action="store_true",
        default=False,
        help="run scenarios marked 'chain' against the configured local node",
    )


def chain_enabled(config) -> bool:
    if config.getoption(RUN_CHAIN_OPTION, default=False):
        return True
    return HarnessConfig.from_env().run_chain


def pytest_configure(config):
    """Register markers and refuse parallel chain runs."""
    config.addinivalue_line(
        "markers",
        "chain: Scenario drives a contract on a live local node"
    )
    config.addinivalue_line(
        "markers",
        "unverified(reason): Scenario logs resulting state without asserting it"
    )
    config.stash[unverified_key] = []

    # Contract tables are one shared resource: scenarios must run one at a time
    workers = getattr(config.option, "numprocesses", None)
    if chain_enabled(config) and workers:
        raise pytest.UsageError(
            "Chain scenarios share contract state and cannot run in parallel; "
            "drop -n/--numprocesses."
        )

    if chain_enabled(config):
        configure_logging()


def pytest_collection_modifyitems(config, items):
    enabled = chain_enabled(config)
    skip_chain = pytest.mark.skip(
        reason=f"needs a local node (use {RUN_CHAIN_OPTION} or DAO_HARNESS_RUN_CHAIN=true)"
    )

    for item in items:
        is_chain = item.get_closest_marker("chain") is not None
        if is_chain and not enabled:
            item.add_marker(skip_chain)
            continue
        marker = item.get_closest_marker("unverified")
        if marker is not None:
            reason = marker.args[0] if marker.args else marker.kwargs.get("reason", "")
            config.stash[unverified_key].append(
                f"{item.nodeid}" + (f" ({reason})" if reason else "")
            )


def pytest_terminal_summary(terminalreporter, exitstatus, config):
    unverified = config.stash.get(unverified_key, [])
    if not unverified:
        return
    terminalreporter.section("unverified scenarios")
    terminalreporter.write_line(
        f"{len(unverified)} scenario(s) log table state without asserting it:"
    )
    for nodeid in unverified:
        terminalreporter.write_line(f"  UNVERIFIED {nodeid}")


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def harness_config() -> HarnessConfig:
    """Harness configuration from DAO_HARNESS_* environment variables."""
    return HarnessConfig.from_env()


@pytest.fixture(scope="session")
def dao_env(harness_config: HarnessConfig):
    """
    Contract environment shared by the whole suite.

    Aborts the run (exit code 1) before any scenario when the configuration is
    invalid or the node is not the local test node.
    """
    is_valid, errors = harness_config.validate()
    if not is_valid:
        pytest.exit(
            "Invalid harness configuration:\n  " + "\n  ".join(errors),
            returncode=1,
        )

    env = ContractEnvironment(harness_config)
    try:
        env.ensure_local_node()
    except EnvironmentMismatchError as e:
        env.close()
        pytest.exit(f"These tests should only be run on local node: {e}", returncode=1)

    env.load_settings()
    yield env
    env.close()


@pytest.fixture(autouse=True)
def reset_contract_state(request):
    """Reset contract tables before every chain scenario."""
    if request.node.get_closest_marker("chain") is None:
        yield
        return
    env = request.getfixturevalue("dao_env")
    env.reset()
    yield


@pytest.fixture
def accounts(dao_env: ContractEnvironment) -> DaoAccounts:
    return dao_env.accounts


@pytest.fixture
def contracts(dao_env: ContractEnvironment) -> ContractSet:
    return dao_env.contracts


@pytest.fixture
def daoreg(dao_env: ContractEnvironment) -> DaoRegistry:
    return dao_env.daoreg


# =============================================================================
# Diagnostics
# =============================================================================

def log_table_state(state: Union[TableSnapshot, List[Any], dict],
                    label: Optional[str] = None) -> str:
    """
    Print table state to the console and the log, for scenarios that inspect
    state without asserting it.

    Returns:
        The JSON text that was printed
    """
    if isinstance(state, TableSnapshot):
        payload = {"rows": state.rows, "more": state.more}
    elif isinstance(state, list):
        payload = {"rows": state}
    else:
        payload = state

    text = json.dumps(payload, indent=2, default=str)
    header = f"[{label}] " if label else ""
    print(f"{header}{text}")
    logger.info(f"{header}table state logged ({len(payload.get('rows', []))} rows)")
    return text
