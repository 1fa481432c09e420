"""
DAO Contract Harness - Data Models

Data classes representing daoreg table rows and the typed action parameters
sent to the contract.

WIRE FORMS:
- VariantValue: ["uint64", 20] (type tag first, value second)
- Attribute: {"first": "key", "second": ["string", "DAOO"]}
- TokenDescriptor: {"first": "token.c", "second": "4,CTK"}
"""

from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any, List, Sequence, Union
import json


# Alternatives of the contract's VariantValue, in declaration order
VARIANT_TYPES = ("uint64", "int64", "float64", "name", "asset", "string")


@dataclass(frozen=True)
class VariantValue:
    """A typed value such as ``("uint64", 20)`` or ``("string", "DAOO")``."""

    type: str
    value: Any

    def __post_init__(self):
        if self.type not in VARIANT_TYPES:
            raise ValueError(
                f"Unknown variant type {self.type!r}, expected one of {VARIANT_TYPES}"
            )

    def to_wire(self) -> List[Any]:
        return [self.type, self.value]

    @classmethod
    def from_wire(cls, data: Union[Sequence[Any], Dict[str, Any], "VariantValue"]) -> "VariantValue":
        """Accept ``[tag, value]``, ``{"type":..,"value":..}`` or a VariantValue."""
        if isinstance(data, VariantValue):
            return data
        if isinstance(data, dict):
            return cls(data["type"], data["value"])
        tag, value = data
        return cls(tag, value)


def uint64(value: int) -> VariantValue:
    return VariantValue("uint64", value)


def int64(value: int) -> VariantValue:
    return VariantValue("int64", value)


def string(value: str) -> VariantValue:
    return VariantValue("string", value)


@dataclass(frozen=True)
class Attribute:
    """Organization attribute: a key paired with a typed value."""

    key: str
    value: VariantValue

    def to_wire(self) -> Dict[str, Any]:
        """Action parameter form (a std::pair)."""
        return {"first": self.key, "second": self.value.to_wire()}

    def to_row(self) -> Dict[str, Any]:
        """Table row form (an entry of a std::map)."""
        return {"key": self.key, "value": self.value.to_wire()}

    @classmethod
    def from_wire(cls, data: Union[Dict[str, Any], Sequence[Any]]) -> "Attribute":
        """Accept the pair form, the map-entry form or a ``(key, value)`` tuple."""
        if isinstance(data, dict):
            if "key" in data:
                return cls(data["key"], VariantValue.from_wire(data["value"]))
            return cls(data["first"], VariantValue.from_wire(data["second"]))
        key, value = data
        return cls(key, VariantValue.from_wire(value))


@dataclass(frozen=True)
class TokenDescriptor:
    """A registered token: contract account plus symbol, e.g. ("token.c", "4,CTK")."""

    token_contract: str
    symbol: str

    @property
    def precision(self) -> int:
        return int(self.symbol.split(",", 1)[0])

    @property
    def code(self) -> str:
        return self.symbol.split(",", 1)[1]

    def to_wire(self) -> Dict[str, Any]:
        return {"first": self.token_contract, "second": self.symbol}

    @classmethod
    def from_wire(cls, data: Union[Dict[str, Any], Sequence[Any]]) -> "TokenDescriptor":
        if isinstance(data, dict):
            return cls(data["first"], data["second"])
        contract, symbol = data
        return cls(contract, symbol)


@dataclass
class DaoRecord:
    """
    Represents a single row of the daoreg ``daos`` table.

    Owned by the contract; the harness only reads it.
    """

    dao_id: int
    dao: str
    creator: str
    ipfs: str
    attributes: List[Attribute] = field(default_factory=list)
    tokens: List[TokenDescriptor] = field(default_factory=list)

    def attribute(self, key: str) -> Optional[VariantValue]:
        """Return the value stored under ``key``, or None."""
        for attr in self.attributes:
            if attr.key == key:
                return attr.value
        return None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the dict shape returned by get_table_rows.

        Attributes live in a map on chain, so they come back sorted by key.
        """
        return {
            "dao_id": self.dao_id,
            "dao": self.dao,
            "creator": self.creator,
            "ipfs": self.ipfs,
            "attributes": [a.to_row() for a in sorted(self.attributes, key=lambda a: a.key)],
            "tokens": [t.to_wire() for t in self.tokens],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DaoRecord":
        """Create DaoRecord from a table row."""
        return cls(
            dao_id=int(data["dao_id"]),
            dao=data["dao"],
            creator=data["creator"],
            ipfs=data["ipfs"],
            attributes=[Attribute.from_wire(a) for a in data.get("attributes", [])],
            tokens=[TokenDescriptor.from_wire(t) for t in data.get("tokens", [])],
        )


@dataclass
class ConfigParam:
    """Contract settings entry: ``key -> VariantValue`` with a description."""

    key: str
    value: VariantValue
    description: str = ""

    def action_params(self) -> List[Any]:
        """Ordered parameters for the ``setparam`` action."""
        return [self.key, self.value.to_wire(), self.description]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConfigParam":
        """
        Build from ``{key, type, value, description}`` (settings file) or
        ``{key, value: [tag, value], description}`` (wire form).
        """
        if "type" in data:
            value = VariantValue(data["type"], data["value"])
        else:
            value = VariantValue.from_wire(data["value"])
        return cls(
            key=str(data["key"]),
            value=value,
            description=data.get("description", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["value"] = self.value.to_wire()
        return data


@dataclass
class ExpectedFailure:
    """
    An expected-failure scenario.

    Attributes:
        error: Error raised by the failed action
        text_inside: Substring that must appear in the error message
        message: Human readable description of the expectation
        throw_error: Whether a mismatch is raised (True) or only logged
    """

    error: Optional[BaseException]
    text_inside: str
    message: str
    throw_error: bool = True


@dataclass
class TableQuery:
    """
    Parameters of a get_table_rows request.

    ``json`` is always true: the harness compares decoded rows.
    """

    code: str
    scope: str
    table: str
    limit: int = 100
    lower_bound: Optional[str] = None
    upper_bound: Optional[str] = None
    index_position: Optional[int] = None
    key_type: Optional[str] = None
    reverse: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Request body, leaving unset optional bounds out."""
        body = {
            "code": self.code,
            "scope": self.scope,
            "table": self.table,
            "json": True,
            "limit": self.limit,
        }
        if self.lower_bound is not None:
            body["lower_bound"] = self.lower_bound
        if self.upper_bound is not None:
            body["upper_bound"] = self.upper_bound
        if self.index_position is not None:
            body["index_position"] = self.index_position
        if self.key_type is not None:
            body["key_type"] = self.key_type
        if self.reverse:
            body["reverse"] = True
        return body

    def __str__(self) -> str:
        return f"{self.code}/{self.scope}/{self.table}"


@dataclass
class TableSnapshot:
    """Rows returned by one table read."""

    rows: List[Dict[str, Any]]
    more: bool = False

    def __len__(self) -> int:
        return len(self.rows)

    def daos(self) -> List[DaoRecord]:
        return [DaoRecord.from_dict(row) for row in self.rows]

    def to_json(self, indent: int = 2) -> str:
        return json.dumps({"rows": self.rows, "more": self.more}, indent=indent)


@dataclass
class ActionResult:
    """Outcome of a successful action."""

    contract: str
    action: str
    authorization: str
    transaction_id: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)
