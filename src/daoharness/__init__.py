"""
DAO Contract Harness - Python Package

Integration test harness for the DAO registry contract: resets contract state,
pushes actions as named accounts, matches expected failures and compares table
snapshots.

Usage:
    from daoharness import ContractEnvironment, expect_failure, expect_state

    env = ContractEnvironment.from_env()
    env.ensure_local_node()
    env.reset()
    env.daoreg.create("dao.org1", env.accounts.daoreg, "HASH_1",
                      authorization=env.owner_auth)
"""

__version__ = "0.1.0"
__author__ = "DAO Registry Team"

# Public API
from .config import HarnessConfig
from .environment import ContractEnvironment
from .contract import Authorization, Contract, ContractSet
from .actions import DaoRegistry
from .accounts import DaoAccounts, AccountProvisioner, random_account_name
from .assertions import (
    assert_error,
    expect_failure,
    expecting_failure,
    expect_state,
    expect_empty,
    missing_authority,
)
from .models import (
    Attribute,
    ConfigParam,
    DaoRecord,
    TableQuery,
    TableSnapshot,
    TokenDescriptor,
    VariantValue,
)
from .errors import (
    HarnessError,
    ActionError,
    ExpectedFailureMismatch,
    StateAssertionMismatch,
    EnvironmentMismatchError,
)

__all__ = [
    "HarnessConfig",
    "ContractEnvironment",
    "Authorization",
    "Contract",
    "ContractSet",
    "DaoRegistry",
    "DaoAccounts",
    "AccountProvisioner",
    "random_account_name",
    "assert_error",
    "expect_failure",
    "expecting_failure",
    "expect_state",
    "expect_empty",
    "missing_authority",
    "Attribute",
    "ConfigParam",
    "DaoRecord",
    "TableQuery",
    "TableSnapshot",
    "TokenDescriptor",
    "VariantValue",
    "HarnessError",
    "ActionError",
    "ExpectedFailureMismatch",
    "StateAssertionMismatch",
    "EnvironmentMismatchError",
]
