"""
Test-data builders for daoreg offers.

    offer = OffersFactory.create_with_defaults(creator="testuseraaa")
    env.daoreg.createoffer(offer, authorization="testuseraaa@active")
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, List, Optional

from .actions import createoffer_params

DEFAULT_DAO_ID = 1
DEFAULT_QUANTITY = "90.0000 DTK"
DEFAULT_PRICE_PER_UNIT = "60.0000 TLOS"


class OfferType(IntEnum):
    SELL = 0
    BUY = 1


class OfferStatus(IntEnum):
    CLOSED = 0
    ACTIVE = 1


@dataclass
class Offer:
    """Parameters of one ``createoffer`` action."""

    dao_id: int
    creator: str
    quantity: str
    price_per_unit: str
    type: OfferType

    def action_params(self) -> List[Any]:
        return createoffer_params(
            self.dao_id, self.creator, self.quantity, self.price_per_unit, int(self.type)
        )


class OffersFactory:

    @staticmethod
    def create_entry(dao_id: int, creator: str, quantity: str,
                     price_per_unit: str, type: OfferType) -> Offer:
        return Offer(
            dao_id=dao_id,
            creator=creator,
            quantity=quantity,
            price_per_unit=price_per_unit,
            type=OfferType(type),
        )

    @staticmethod
    def create_with_defaults(dao_id: Optional[int] = None,
                             creator: Optional[str] = None,
                             quantity: Optional[str] = None,
                             price_per_unit: Optional[str] = None,
                             type: Optional[OfferType] = None,
                             provisioner=None) -> Offer:
        """
        Build an offer, filling missing fields with defaults.

        A missing creator is minted on chain through ``provisioner``
        (an AccountProvisioner); without one a creator must be given.
        """
        if dao_id is None:
            dao_id = DEFAULT_DAO_ID

        if creator is None:
            if provisioner is None:
                raise ValueError("creator is required when no provisioner is given")
            creator = provisioner.create_random_account()

        return OffersFactory.create_entry(
            dao_id=dao_id,
            creator=creator,
            quantity=quantity or DEFAULT_QUANTITY,
            price_per_unit=price_per_unit or DEFAULT_PRICE_PER_UNIT,
            type=OfferType.BUY if type is None else type,
        )
