"""
Event decoder

Maps raw Starknet event logs back to typed Stela events. Dispatch is on keys[0],
the event selector (starknet_keccak of the event name). Each known selector has
a fixed layout over keys[1:] and data[:]; u256 values always arrive as adjacent
(low, high) words. Unknown selectors decode to None so newer contract events
never break older readers.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import EncodingError
from .felt import from_u256, parse_int
from .hashing import get_selector_from_name

logger = logging.getLogger(__name__)

EVENT_NAMES = (
    "InscriptionCreated",
    "InscriptionSigned",
    "InscriptionCancelled",
    "InscriptionRepaid",
    "InscriptionLiquidated",
    "SharesRedeemed",
    "TransferSingle",
    "OrderSettled",
    "OrderFilled",
    "OrderCancelled",
    "OrdersBulkCancelled",
)

# Computed once at import
SELECTORS: Dict[str, int] = {name: get_selector_from_name(name) for name in EVENT_NAMES}


@dataclass(frozen=True)
class RawEvent:
    keys: Sequence[Any]
    data: Sequence[Any]
    transaction_hash: str
    block_number: int

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "RawEvent":
        return cls(
            keys=list(raw["keys"]),
            data=list(raw["data"]),
            transaction_hash=raw.get("transaction_hash", ""),
            block_number=raw.get("block_number", 0),
        )


@dataclass(frozen=True)
class InscriptionCreated:
    inscription_id: int
    creator: str
    is_borrow: bool
    transaction_hash: str
    block_number: int
    type = "InscriptionCreated"


@dataclass(frozen=True)
class InscriptionSigned:
    inscription_id: int
    borrower: str
    lender: str
    issued_debt_percentage: int
    shares_minted: int
    transaction_hash: str
    block_number: int
    type = "InscriptionSigned"


@dataclass(frozen=True)
class InscriptionCancelled:
    inscription_id: int
    creator: str
    transaction_hash: str
    block_number: int
    type = "InscriptionCancelled"


@dataclass(frozen=True)
class InscriptionRepaid:
    inscription_id: int
    repayer: str
    transaction_hash: str
    block_number: int
    type = "InscriptionRepaid"


@dataclass(frozen=True)
class InscriptionLiquidated:
    inscription_id: int
    liquidator: str
    transaction_hash: str
    block_number: int
    type = "InscriptionLiquidated"


@dataclass(frozen=True)
class SharesRedeemed:
    inscription_id: int
    redeemer: str
    shares: int
    transaction_hash: str
    block_number: int
    type = "SharesRedeemed"


@dataclass(frozen=True)
class TransferSingle:
    """ERC1155 share transfer emitted by the Stela contract"""

    operator: str
    from_address: str
    to_address: str
    id: int
    value: int
    transaction_hash: str
    block_number: int
    type = "TransferSingle"


StelaEvent = Union[
    InscriptionCreated,
    InscriptionSigned,
    InscriptionCancelled,
    InscriptionRepaid,
    InscriptionLiquidated,
    SharesRedeemed,
    TransferSingle,
]


def _u256(low: Any, high: Any) -> int:
    return from_u256(low, high)


def _address(value: Any) -> str:
    return value if isinstance(value, str) else hex(value)


def _inscription_created(keys, data, tx, block):
    # keys: [selector, id_low, id_high, creator]  data: [is_borrow]
    return InscriptionCreated(
        inscription_id=_u256(keys[1], keys[2]),
        creator=_address(keys[3]),
        is_borrow=parse_int(data[0]) != 0,
        transaction_hash=tx,
        block_number=block,
    )


def _inscription_signed(keys, data, tx, block):
    # keys: [selector, id_low, id_high, borrower, lender]
    # data: [pct_low, pct_high, shares_low, shares_high]
    return InscriptionSigned(
        inscription_id=_u256(keys[1], keys[2]),
        borrower=_address(keys[3]),
        lender=_address(keys[4]),
        issued_debt_percentage=_u256(data[0], data[1]),
        shares_minted=_u256(data[2], data[3]),
        transaction_hash=tx,
        block_number=block,
    )


def _inscription_cancelled(keys, data, tx, block):
    # keys: [selector, id_low, id_high]  data: [creator]
    return InscriptionCancelled(
        inscription_id=_u256(keys[1], keys[2]),
        creator=_address(data[0]),
        transaction_hash=tx,
        block_number=block,
    )


def _inscription_repaid(keys, data, tx, block):
    # keys: [selector, id_low, id_high]  data: [repayer]
    return InscriptionRepaid(
        inscription_id=_u256(keys[1], keys[2]),
        repayer=_address(data[0]),
        transaction_hash=tx,
        block_number=block,
    )


def _inscription_liquidated(keys, data, tx, block):
    # keys: [selector, id_low, id_high]  data: [liquidator]
    return InscriptionLiquidated(
        inscription_id=_u256(keys[1], keys[2]),
        liquidator=_address(data[0]),
        transaction_hash=tx,
        block_number=block,
    )


def _shares_redeemed(keys, data, tx, block):
    # keys: [selector, id_low, id_high, redeemer]  data: [shares_low, shares_high]
    return SharesRedeemed(
        inscription_id=_u256(keys[1], keys[2]),
        redeemer=_address(keys[3]),
        shares=_u256(data[0], data[1]),
        transaction_hash=tx,
        block_number=block,
    )


def _transfer_single(keys, data, tx, block):
    # keys: [selector, operator, from, to]
    # data: [id_low, id_high, value_low, value_high]
    return TransferSingle(
        operator=_address(keys[1]),
        from_address=_address(keys[2]),
        to_address=_address(keys[3]),
        id=_u256(data[0], data[1]),
        value=_u256(data[2], data[3]),
        transaction_hash=tx,
        block_number=block,
    )


# selector -> (decoder, minimum keys length incl. selector, minimum data length)
_DECODERS: Dict[int, Tuple[Callable[..., StelaEvent], int, int]] = {
    SELECTORS["InscriptionCreated"]: (_inscription_created, 4, 1),
    SELECTORS["InscriptionSigned"]: (_inscription_signed, 5, 4),
    SELECTORS["InscriptionCancelled"]: (_inscription_cancelled, 3, 1),
    SELECTORS["InscriptionRepaid"]: (_inscription_repaid, 3, 1),
    SELECTORS["InscriptionLiquidated"]: (_inscription_liquidated, 3, 1),
    SELECTORS["SharesRedeemed"]: (_shares_redeemed, 4, 2),
    SELECTORS["TransferSingle"]: (_transfer_single, 4, 4),
}


def decode_event(raw: Union[RawEvent, Mapping[str, Any]]) -> Optional[StelaEvent]:
    """Decode one raw event, None if the selector is not a known Stela event"""
    if not isinstance(raw, RawEvent):
        raw = RawEvent.from_dict(raw)
    if not raw.keys:
        return None
    entry = _DECODERS.get(parse_int(raw.keys[0]))
    if entry is None:
        logger.debug("Skipping event with unknown selector %s", raw.keys[0])
        return None
    decoder, keys_len, data_len = entry
    if len(raw.keys) < keys_len or len(raw.data) < data_len:
        raise EncodingError(
            f"Event {raw.keys[0]} expects {keys_len} keys and {data_len} data words, "
            f"got {len(raw.keys)} and {len(raw.data)}"
        )
    return decoder(raw.keys, raw.data, raw.transaction_hash, raw.block_number)


def decode_events(raw_events: Iterable[Union[RawEvent, Mapping[str, Any]]]) -> List[StelaEvent]:
    """Decode a batch of raw events, skipping unrecognized ones"""
    events = []
    for raw in raw_events:
        event = decode_event(raw)
        if event is not None:
            events.append(event)
    return events
