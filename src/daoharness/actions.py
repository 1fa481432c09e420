"""
Typed parameter builders for the daoreg contract actions.

Each builder returns the ordered parameter list the action expects. DaoRegistry
pairs them with a Contract so scenarios read like the contract's interface.
"""

from typing import Any, Iterable, List, Mapping, Sequence, Tuple, Union

from .contract import AuthorizationLike, Contract
from .models import ActionResult, Attribute, ConfigParam, TokenDescriptor, VariantValue

AttributeLike = Union[Attribute, Tuple[str, Any], Mapping[str, Any]]


def _attribute(value: AttributeLike) -> Attribute:
    if isinstance(value, Attribute):
        return value
    return Attribute.from_wire(value)


def reset_params() -> List[Any]:
    return []


def create_params(dao: str, creator: str, ipfs: str) -> List[Any]:
    return [dao, creator, ipfs]


def update_params(dao_id: int, ipfs: str) -> List[Any]:
    return [dao_id, ipfs]


def delorg_params(dao_id: int) -> List[Any]:
    return [dao_id]


def setparam_params(key: str, value: Union[VariantValue, Sequence[Any]],
                    description: str) -> List[Any]:
    return ConfigParam(key, VariantValue.from_wire(value), description).action_params()


def resetsttngs_params() -> List[Any]:
    return []


def upsertattrs_params(dao_id: int, attributes: Iterable[AttributeLike]) -> List[Any]:
    """
    Attributes may be Attribute objects, ``(key, (tag, value))`` pairs or
    ``{"first": key, "second": [tag, value]}`` dicts.
    """
    return [dao_id, [_attribute(a).to_wire() for a in attributes]]


def delattrs_params(dao_id: int, keys: Iterable[str]) -> List[Any]:
    return [dao_id, list(keys)]


def addtoken_params(dao_id: int, token_contract: str, symbol: str) -> List[Any]:
    return [dao_id, token_contract, symbol]


def withdraw_params(account: str, dao: str, quantity: str) -> List[Any]:
    return [account, dao, quantity]


def createoffer_params(dao_id: int, creator: str, quantity: str,
                       price_per_unit: str, offer_type: int) -> List[Any]:
    return [dao_id, creator, quantity, price_per_unit, offer_type]


def removeoffer_params(dao_id: int, offer_id: int) -> List[Any]:
    return [dao_id, offer_id]


def acceptoffer_params(dao_id: int, account: str, offer_id: int) -> List[Any]:
    return [dao_id, account, offer_id]


class DaoRegistry:
    """
    Typed front for the daoreg contract.

    Every method takes the authorizing permission level as ``authorization``
    and returns the ActionResult, or raises ActionError.
    """

    def __init__(self, contract: Contract):
        self.contract = contract

    @property
    def account(self) -> str:
        return self.contract.account

    def reset(self, authorization: AuthorizationLike) -> ActionResult:
        return self.contract.invoke("reset", reset_params(), authorization)

    def create(self, dao: str, creator: str, ipfs: str,
               authorization: AuthorizationLike) -> ActionResult:
        return self.contract.invoke("create", create_params(dao, creator, ipfs), authorization)

    def update(self, dao_id: int, ipfs: str, authorization: AuthorizationLike) -> ActionResult:
        return self.contract.invoke("update", update_params(dao_id, ipfs), authorization)

    def delorg(self, dao_id: int, authorization: AuthorizationLike) -> ActionResult:
        return self.contract.invoke("delorg", delorg_params(dao_id), authorization)

    def setparam(self, key: str, value, description: str,
                 authorization: AuthorizationLike) -> ActionResult:
        return self.contract.invoke(
            "setparam", setparam_params(key, value, description), authorization
        )

    def resetsttngs(self, authorization: AuthorizationLike) -> ActionResult:
        return self.contract.invoke("resetsttngs", resetsttngs_params(), authorization)

    def upsertattrs(self, dao_id: int, attributes: Iterable[AttributeLike],
                    authorization: AuthorizationLike) -> ActionResult:
        return self.contract.invoke(
            "upsertattrs", upsertattrs_params(dao_id, attributes), authorization
        )

    def delattrs(self, dao_id: int, keys: Iterable[str],
                 authorization: AuthorizationLike) -> ActionResult:
        return self.contract.invoke("delattrs", delattrs_params(dao_id, keys), authorization)

    def addtoken(self, dao_id: int, token: TokenDescriptor,
                 authorization: AuthorizationLike) -> ActionResult:
        return self.contract.invoke(
            "addtoken",
            addtoken_params(dao_id, token.token_contract, token.symbol),
            authorization,
        )

    def withdraw(self, account: str, dao: str, quantity: str,
                 authorization: AuthorizationLike) -> ActionResult:
        return self.contract.invoke("withdraw", withdraw_params(account, dao, quantity), authorization)

    def createoffer(self, offer, authorization: AuthorizationLike) -> ActionResult:
        """Create an offer from an ``Offer`` built by OffersFactory."""
        return self.contract.invoke("createoffer", offer.action_params(), authorization)

    def removeoffer(self, dao_id: int, offer_id: int,
                    authorization: AuthorizationLike) -> ActionResult:
        return self.contract.invoke("removeoffer", removeoffer_params(dao_id, offer_id), authorization)

    def acceptoffer(self, dao_id: int, account: str, offer_id: int,
                    authorization: AuthorizationLike) -> ActionResult:
        return self.contract.invoke(
            "acceptoffer", acceptoffer_params(dao_id, account, offer_id), authorization
        )
