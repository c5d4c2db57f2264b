"""
Signable business objects

InscriptionOrder (borrower), LendOffer (lender) and SignedOrder (order-book
maker), their JSON forms, and the typed-data builders that turn them into SNIP-12
messages. JSON field names mirror the Cairo struct fields so any third party can
re-verify the hashes from a stored payload.

Serialization policy: addresses and felts as 0x hex, u256 amounts and integer
scalars as decimal strings, flags as JSON booleans.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple

from .assets import Asset, hash_assets
from .errors import EncodingError
from .felt import normalize_address, parse_bool, parse_int, split_u256, to_felt, to_hex, to_u256
from .typed_data import (
    LOAN_SCHEMA,
    LOAN_SCHEMA_V0,
    MATCHING_SCHEMA,
    TypedData,
    loan_domain,
    matching_domain,
)


def _asset_tuple(name: str, assets: Any) -> Tuple[Asset, ...]:
    # Accepts Asset instances or their JSON mappings
    if not isinstance(assets, (list, tuple)):
        raise EncodingError(f"{name} must be a list of assets, got {assets!r}")
    result = []
    for asset in assets:
        if isinstance(asset, Mapping):
            try:
                asset = Asset.from_dict(asset)
            except KeyError as exc:
                raise EncodingError(f"{name} entry is missing {exc.args[0]!r}") from None
        elif not isinstance(asset, Asset):
            raise EncodingError(f"{name} entries must be Asset or mapping, got {asset!r}")
        result.append(asset)
    return tuple(result)


@dataclass(frozen=True)
class InscriptionOrder:
    borrower: str
    debt_assets: Tuple[Asset, ...]
    interest_assets: Tuple[Asset, ...]
    collateral_assets: Tuple[Asset, ...]
    duration: int
    deadline: int
    multi_lender: bool = False
    nonce: int = 0

    def __post_init__(self):
        for name in ("debt_assets", "interest_assets", "collateral_assets"):
            object.__setattr__(self, name, _asset_tuple(name, getattr(self, name)))
        for name in ("duration", "deadline", "nonce"):
            object.__setattr__(self, name, parse_int(getattr(self, name)))
        object.__setattr__(self, "multi_lender", parse_bool(self.multi_lender))

    @property
    def debt_hash(self) -> int:
        return hash_assets(self.debt_assets)

    @property
    def interest_hash(self) -> int:
        return hash_assets(self.interest_assets)

    @property
    def collateral_hash(self) -> int:
        return hash_assets(self.collateral_assets)

    def to_message(self) -> Dict[str, Any]:
        return {
            "borrower": normalize_address(self.borrower),
            "debt_hash": hex(self.debt_hash),
            "interest_hash": hex(self.interest_hash),
            "collateral_hash": hex(self.collateral_hash),
            "debt_count": str(len(self.debt_assets)),
            "interest_count": str(len(self.interest_assets)),
            "collateral_count": str(len(self.collateral_assets)),
            "duration": str(self.duration),
            "deadline": str(self.deadline),
            "multi_lender": self.multi_lender,
            "nonce": str(self.nonce),
        }

    def typed_data(self, chain_id: str) -> TypedData:
        return get_inscription_order_typed_data(self, chain_id)

    def message_hash(self, chain_id: str) -> int:
        return self.typed_data(chain_id).message_hash(self.borrower)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "borrower": normalize_address(self.borrower),
            "debt_assets": [a.to_dict() for a in self.debt_assets],
            "interest_assets": [a.to_dict() for a in self.interest_assets],
            "collateral_assets": [a.to_dict() for a in self.collateral_assets],
            "duration": str(self.duration),
            "deadline": str(self.deadline),
            "multi_lender": self.multi_lender,
            "nonce": str(self.nonce),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InscriptionOrder":
        return cls(
            borrower=data["borrower"],
            debt_assets=tuple(Asset.from_dict(a) for a in data["debt_assets"]),
            interest_assets=tuple(Asset.from_dict(a) for a in data["interest_assets"]),
            collateral_assets=tuple(Asset.from_dict(a) for a in data["collateral_assets"]),
            duration=data["duration"],
            deadline=data["deadline"],
            multi_lender=data.get("multi_lender", False),
            nonce=data.get("nonce", 0),
        )


@dataclass(frozen=True)
class LendOffer:
    order_hash: int
    lender: str
    issued_debt_percentage: int
    nonce: int = 0
    # Zero means non-private: shares are minted to the lender
    lender_commitment: int = 0

    def __post_init__(self):
        for name in ("order_hash", "issued_debt_percentage", "nonce", "lender_commitment"):
            object.__setattr__(self, name, parse_int(getattr(self, name)))

    @property
    def is_private(self) -> bool:
        return self.lender_commitment != 0

    def to_message(self, legacy: bool = False) -> Dict[str, Any]:
        low, high = to_u256(self.issued_debt_percentage)
        message = {
            "order_hash": hex(to_felt(self.order_hash)),
            "lender": normalize_address(self.lender),
            "issued_debt_percentage": {"low": str(low), "high": str(high)},
            "nonce": str(self.nonce),
        }
        if not legacy:
            message["lender_commitment"] = hex(to_felt(self.lender_commitment))
        return message

    def typed_data(self, chain_id: str, legacy: bool = False) -> TypedData:
        return get_lend_offer_typed_data(self, chain_id, legacy=legacy)

    def message_hash(self, chain_id: str, legacy: bool = False) -> int:
        return self.typed_data(chain_id, legacy=legacy).message_hash(self.lender)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "order_hash": hex(self.order_hash),
            "lender": normalize_address(self.lender),
            "issued_debt_percentage": str(self.issued_debt_percentage),
            "nonce": str(self.nonce),
            "lender_commitment": hex(self.lender_commitment),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LendOffer":
        return cls(
            order_hash=data["order_hash"],
            lender=data["lender"],
            issued_debt_percentage=data["issued_debt_percentage"],
            nonce=data.get("nonce", 0),
            lender_commitment=data.get("lender_commitment", 0),
        )


@dataclass(frozen=True)
class SignedOrder:
    """Maker order as exchanged with the matching service"""

    maker: str
    allowed_taker: str
    inscription_id: int
    bps: int
    deadline: int
    nonce: int
    min_fill_bps: int = 0

    def __post_init__(self):
        for name in ("inscription_id", "bps", "deadline", "nonce", "min_fill_bps"):
            object.__setattr__(self, name, parse_int(getattr(self, name)))

    @property
    def is_public(self) -> bool:
        return to_felt(self.allowed_taker) == 0

    def to_message(self) -> Dict[str, Any]:
        return {
            "maker": normalize_address(self.maker),
            "allowed_taker": normalize_address(self.allowed_taker),
            "inscription_id": split_u256(self.inscription_id),
            "bps": split_u256(self.bps),
            "deadline": str(self.deadline),
            "nonce": hex(to_felt(self.nonce)),
            "min_fill_bps": split_u256(self.min_fill_bps),
        }

    def typed_data(self, chain_id: str) -> TypedData:
        return build_signed_order_typed_data(self, chain_id)

    def message_hash(self, chain_id: str) -> int:
        return self.typed_data(chain_id).message_hash(self.maker)

    def to_dict(self) -> Dict[str, Any]:
        # Mirrors the matching service's SignedOrder JSON
        return {
            "maker": to_hex(self.maker),
            "allowed_taker": to_hex(self.allowed_taker),
            "inscription_id": str(self.inscription_id),
            "bps": str(self.bps),
            "deadline": self.deadline,
            "nonce": hex(self.nonce),
            "min_fill_bps": str(self.min_fill_bps),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SignedOrder":
        return cls(
            maker=data["maker"],
            allowed_taker=data.get("allowed_taker", "0x0"),
            inscription_id=data["inscription_id"],
            bps=data["bps"],
            deadline=data["deadline"],
            nonce=data["nonce"],
            min_fill_bps=data.get("min_fill_bps", 0),
        )


def get_inscription_order_typed_data(order: InscriptionOrder, chain_id: str) -> TypedData:
    """SNIP-12 typed data a borrower signs to create an order without gas"""
    return TypedData(
        schema=LOAN_SCHEMA,
        primary_type="InscriptionOrder",
        domain=loan_domain(chain_id).to_dict(),
        message=order.to_message(),
    )


def get_lend_offer_typed_data(offer: LendOffer, chain_id: str, legacy: bool = False) -> TypedData:
    """SNIP-12 typed data a lender signs to accept an order without gas.

    legacy=True builds the LendOffer type as it was before lender_commitment was
    added; it is a different type signature and cannot carry a commitment.
    """
    if legacy and offer.is_private:
        raise EncodingError("The pre-commitment LendOffer type cannot carry a lender_commitment")
    return TypedData(
        schema=LOAN_SCHEMA_V0 if legacy else LOAN_SCHEMA,
        primary_type="LendOffer",
        domain=loan_domain(chain_id).to_dict(),
        message=offer.to_message(legacy=legacy),
    )


def build_signed_order_typed_data(order: SignedOrder, chain_id: str) -> TypedData:
    """SNIP-12 typed data for a maker order under the order-book domain"""
    return TypedData(
        schema=MATCHING_SCHEMA,
        primary_type="SignedOrder",
        domain=matching_domain(chain_id).to_dict(),
        message=order.to_message(),
    )
