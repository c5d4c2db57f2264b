"""
Calldata builders for the Stela contract entry points

Pure functions: they only lay out felts, submission belongs to the caller's
account / RPC layer.
"""

from dataclasses import dataclass, field
from typing import List, Sequence

from .assets import Asset, serialize_assets
from .felt import parse_bool, to_felt, to_u256
from .orders import InscriptionOrder, LendOffer


@dataclass(frozen=True)
class Call:
    contract_address: str
    entrypoint: str
    calldata: List[int] = field(default_factory=list)

    def to_dict(self):
        return {
            "contractAddress": self.contract_address,
            "entrypoint": self.entrypoint,
            "calldata": [str(x) for x in self.calldata],
        }


def _signature(sig: Sequence[int]) -> List[int]:
    return [len(sig), *(to_felt(x) for x in sig)]


def build_create_inscription(stela_address: str, is_borrow: bool,
                             debt_assets: Sequence[Asset], interest_assets: Sequence[Asset],
                             collateral_assets: Sequence[Asset], duration: int,
                             deadline: int, multi_lender: bool) -> Call:
    calldata = [
        int(parse_bool(is_borrow)),
        *serialize_assets(debt_assets),
        *serialize_assets(interest_assets),
        *serialize_assets(collateral_assets),
        duration,
        deadline,
        int(parse_bool(multi_lender)),
    ]
    return Call(stela_address, "create_inscription", calldata)


def build_sign_inscription(stela_address: str, inscription_id: int, bps: int) -> Call:
    return Call(stela_address, "sign_inscription", [*to_u256(inscription_id), *to_u256(bps)])


def build_cancel_inscription(stela_address: str, inscription_id: int) -> Call:
    return Call(stela_address, "cancel_inscription", list(to_u256(inscription_id)))


def build_repay(stela_address: str, inscription_id: int) -> Call:
    return Call(stela_address, "repay", list(to_u256(inscription_id)))


def build_liquidate(stela_address: str, inscription_id: int) -> Call:
    return Call(stela_address, "liquidate", list(to_u256(inscription_id)))


def build_redeem(stela_address: str, inscription_id: int, shares: int) -> Call:
    return Call(stela_address, "redeem", [*to_u256(inscription_id), *to_u256(shares)])


def build_settle(stela_address: str, order: InscriptionOrder, borrower_sig: Sequence[int],
                 offer: LendOffer, lender_sig: Sequence[int]) -> Call:
    """settle(order, debt, interest, collateral, borrower_sig, offer, lender_sig)"""
    calldata = [
        to_felt(order.borrower),
        order.debt_hash,
        order.interest_hash,
        order.collateral_hash,
        len(order.debt_assets),
        len(order.interest_assets),
        len(order.collateral_assets),
        order.duration,
        order.deadline,
        int(order.multi_lender),
        order.nonce,
        *serialize_assets(order.debt_assets),
        *serialize_assets(order.interest_assets),
        *serialize_assets(order.collateral_assets),
        *_signature(borrower_sig),
        to_felt(offer.order_hash),
        to_felt(offer.lender),
        *to_u256(offer.issued_debt_percentage),
        offer.nonce,
        to_felt(offer.lender_commitment),
        *_signature(lender_sig),
    ]
    return Call(stela_address, "settle", calldata)
