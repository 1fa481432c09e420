"""
DAO Contract Harness - Action Invoker

Contract wraps one deployed contract account. Actions are called either
explicitly with ``invoke`` or as attributes:

    daoreg = Contract("daoregistry1", transport)
    daoreg.create("dao.org1", "daoregistry1", "HASH_1",
                  authorization="daoregistry1@active")

Failures are raised as ActionError carrying the node's message untouched.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from .assertions import ActionOutcome, classify_failure
from .errors import ActionError
from .logger import log_action, track_duration
from .models import ActionResult
from .transport import ActionTransport

logger = logging.getLogger(__name__)

DEFAULT_PERMISSION = "active"


@dataclass(frozen=True)
class Authorization:
    """Permission level ``<account>@<permission>``."""

    actor: str
    permission: str = DEFAULT_PERMISSION

    @classmethod
    def parse(cls, value: Union[str, "Authorization"]) -> "Authorization":
        if isinstance(value, Authorization):
            return value
        if not value:
            raise ValueError("Authorization must not be empty")
        actor, sep, permission = value.partition("@")
        if not actor:
            raise ValueError(f"Authorization has no actor: {value!r}")
        if sep and not permission:
            raise ValueError(f"Authorization has no permission: {value!r}")
        return cls(actor, permission or DEFAULT_PERMISSION)

    def __str__(self) -> str:
        return f"{self.actor}@{self.permission}"


AuthorizationLike = Union[str, Authorization, Sequence[Union[str, Authorization]]]


def normalize_authorization(authorization: AuthorizationLike) -> List[Authorization]:
    """Turn one or several permission levels into a list of Authorization."""
    if isinstance(authorization, (str, Authorization)):
        return [Authorization.parse(authorization)]
    levels = [Authorization.parse(a) for a in authorization]
    if not levels:
        raise ValueError("At least one authorization is required")
    return levels


def _to_wire(value: Any) -> Any:
    """Convert typed parameters (models with to_wire) into JSON values."""
    if hasattr(value, "to_wire"):
        return value.to_wire()
    if isinstance(value, (list, tuple)):
        return [_to_wire(v) for v in value]
    return value


class Contract:
    """
    A deployed contract reachable through an action transport.

    Every call blocks until the node answers; state changes are visible to
    table reads as soon as the call returns.
    """

    def __init__(self, account: str, transport: ActionTransport):
        self.account = account
        self.transport = transport

    def invoke(self, action: str, params: Optional[Iterable[Any]] = None,
               authorization: AuthorizationLike = None) -> ActionResult:
        """
        Submit ``action`` with ordered ``params`` signed by ``authorization``.

        Returns:
            ActionResult on success

        Raises:
            ActionError: The contract or node rejected the action
        """
        if authorization is None:
            raise ValueError(f"{self.account}::{action} needs an authorization")

        levels = normalize_authorization(authorization)
        auth_text = ",".join(str(level) for level in levels)
        wire_params = [_to_wire(p) for p in (params or [])]

        with track_duration() as elapsed:
            try:
                trace = self.transport.push_action(
                    self.account, action, wire_params, [str(level) for level in levels]
                )
            except ActionError as e:
                # Fill in context the transport may not know about
                if e.action is None:
                    e.action = action
                if e.authorization is None:
                    e.authorization = auth_text
                log_action(self.account, action, auth_text, elapsed(), False,
                           outcome=classify_failure(e).value, error=e.message[:500])
                raise

        log_action(self.account, action, auth_text, elapsed(), True,
                   outcome=ActionOutcome.SUCCESS.value)
        return ActionResult(
            contract=self.account,
            action=action,
            authorization=auth_text,
            transaction_id=(trace or {}).get("transaction_id"),
            raw=trace or {},
        )

    def __getattr__(self, action: str):
        if action.startswith("_"):
            raise AttributeError(action)

        def call(*params, authorization: AuthorizationLike = None) -> ActionResult:
            return self.invoke(action, params, authorization=authorization)

        call.__name__ = action
        return call

    def __repr__(self) -> str:
        return f"Contract({self.account!r})"


class ContractSet:
    """Named contracts, addressable as attributes (``contracts.daoreg``)."""

    def __init__(self, contracts: Dict[str, Contract]):
        self._contracts = dict(contracts)

    @classmethod
    def load(cls, names: Dict[str, str], transport: ActionTransport) -> "ContractSet":
        """
        Build contracts for ``{alias: account}``.

        Example:
            ContractSet.load({"daoreg": "daoregistry1"}, transport).daoreg
        """
        return cls({alias: Contract(account, transport) for alias, account in names.items()})

    def __getattr__(self, alias: str) -> Contract:
        if alias.startswith("_"):
            raise AttributeError(alias)
        try:
            return self._contracts[alias]
        except KeyError:
            raise AttributeError(f"No contract loaded under {alias!r}") from None

    def __getitem__(self, alias: str) -> Contract:
        return self._contracts[alias]

    def __contains__(self, alias: str) -> bool:
        return alias in self._contracts
