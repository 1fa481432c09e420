"""
DAO Contract Harness - Account Provisioning

Named test identities and random account creation.
"""

import logging
import re
import secrets
from dataclasses import dataclass
from typing import List, Optional

from .config import HarnessConfig

logger = logging.getLogger(__name__)

NAME_ALPHABET = "abcdefghijklmnopqrstuvwxyz12345"
_NAME_RE = re.compile(r"^[a-z1-5.]{1,12}$")


def is_valid_account_name(name: str) -> bool:
    """Return True if ``name`` is a valid 12 character account name."""
    if not isinstance(name, str) or not _NAME_RE.match(name):
        return False
    return not name.endswith(".")


def random_account_name(prefix: str = "") -> str:
    """
    Mint a random 12 character account name.

    Args:
        prefix: Optional fixed prefix (must itself use the name alphabet)

    Returns:
        str: Account name such as "testk3b1zqae"
    """
    if len(prefix) >= 12:
        raise ValueError(f"Prefix too long for an account name: {prefix!r}")
    if prefix and not is_valid_account_name(prefix.rstrip(".") or "a"):
        raise ValueError(f"Invalid account name prefix: {prefix!r}")

    suffix = "".join(secrets.choice(NAME_ALPHABET) for _ in range(12 - len(prefix)))
    return prefix + suffix


@dataclass(frozen=True)
class DaoAccounts:
    """
    Identities used by the scenarios.

    daoreg owns the registry contract; daoinf is a second contract account
    that holds no authority over daoreg and acts as the "someone else".
    """

    daoreg: str
    daoinf: str
    firstuser: str
    seconduser: str
    thirduser: str
    fourthuser: str

    @classmethod
    def from_config(cls, config: HarnessConfig) -> "DaoAccounts":
        if len(config.users) < 4:
            raise ValueError(
                f"Four test users required, got {len(config.users)}: {config.users}"
            )
        first, second, third, fourth = config.users[:4]
        return cls(
            daoreg=config.daoreg_account,
            daoinf=config.daoinf_account,
            firstuser=first,
            seconduser=second,
            thirduser=third,
            fourthuser=fourth,
        )

    @property
    def users(self) -> List[str]:
        return [self.firstuser, self.seconduser, self.thirduser, self.fourthuser]


class AccountProvisioner:
    """Creates fresh accounts on the node through the action transport."""

    def __init__(self, transport, creator: str = "eosio",
                 public_key: Optional[str] = None):
        """
        Args:
            transport: CleosTransport used to run ``create account``
            creator: Account paying for the new accounts
            public_key: Owner and active key for new accounts
        """
        self.transport = transport
        self.creator = creator
        self.public_key = public_key or transport.config.public_key

    def create_account(self, name: str) -> str:
        if not is_valid_account_name(name):
            raise ValueError(f"Invalid account name: {name!r}")
        self.transport.create_account(self.creator, name, self.public_key)
        logger.info(f"Created account {name}")
        return name

    def create_random_account(self, prefix: str = "") -> str:
        return self.create_account(random_account_name(prefix))
