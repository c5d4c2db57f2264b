"""
On-chain inscription state: typed decode of get_inscription and status rules
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence

from .config import MAX_BPS
from .errors import EncodingError
from .felt import from_u256, parse_int

# Felt count of the serialized StoredInscription struct
STORED_INSCRIPTION_LEN = 13


class InscriptionStatus(str, Enum):
    OPEN = "open"
    PARTIAL = "partial"
    FILLED = "filled"
    REPAID = "repaid"
    LIQUIDATED = "liquidated"
    EXPIRED = "expired"
    CANCELLED = "cancelled"

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class StoredInscription:
    borrower: str
    lender: str
    duration: int
    deadline: int
    signed_at: int
    issued_debt_percentage: int
    is_repaid: bool
    liquidated: bool
    multi_lender: bool
    debt_asset_count: int
    interest_asset_count: int
    collateral_asset_count: int


def decode_stored_inscription(felts: Sequence[Any]) -> StoredInscription:
    """Decode the raw felts returned by get_inscription.

    Layout: borrower, lender, duration, deadline, signed_at,
    issued_debt_percentage (low, high), is_repaid, liquidated, multi_lender,
    debt_asset_count, interest_asset_count, collateral_asset_count
    """
    if len(felts) != STORED_INSCRIPTION_LEN:
        raise EncodingError(
            f"StoredInscription expects {STORED_INSCRIPTION_LEN} felts, got {len(felts)}"
        )
    v = [parse_int(x) for x in felts]
    return StoredInscription(
        borrower=hex(v[0]),
        lender=hex(v[1]),
        duration=v[2],
        deadline=v[3],
        signed_at=v[4],
        issued_debt_percentage=from_u256(v[5], v[6]),
        is_repaid=v[7] != 0,
        liquidated=v[8] != 0,
        multi_lender=v[9] != 0,
        debt_asset_count=v[10],
        interest_asset_count=v[11],
        collateral_asset_count=v[12],
    )


def compute_status(inscription: StoredInscription, now: Optional[int] = None,
                   cancelled: bool = False) -> InscriptionStatus:
    """Status of an inscription from its on-chain fields"""
    if inscription.is_repaid:
        return InscriptionStatus.REPAID
    if inscription.liquidated:
        return InscriptionStatus.LIQUIDATED
    if cancelled:
        return InscriptionStatus.CANCELLED

    if now is None:
        now = int(time.time())

    # Unsigned
    if inscription.signed_at == 0:
        if inscription.deadline > 0 and now > inscription.deadline:
            return InscriptionStatus.EXPIRED
        return InscriptionStatus.OPEN

    if inscription.issued_debt_percentage < MAX_BPS:
        return InscriptionStatus.PARTIAL

    if now > inscription.signed_at + inscription.duration:
        return InscriptionStatus.EXPIRED

    return InscriptionStatus.FILLED
