"""
Signing capability adapter

The curve arithmetic lives in starknet-py; this module only feeds it correctly
formed message hashes and converts signatures between the (r, s) tuple, the
[r, s] wire list and the {"r", "s"} storage form.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from starknet_py.hash.utils import message_signature, private_to_stark_key, verify_message_signature

from .errors import EncodingError
from .felt import parse_int, to_felt
from .typed_data import TypedData

logger = logging.getLogger(__name__)

Signature = Tuple[int, int]


def get_public_key(private_key: Any) -> int:
    return private_to_stark_key(parse_int(private_key))


def sign_message_hash(message_hash: Any, private_key: Any) -> Signature:
    r, s = message_signature(to_felt(message_hash), parse_int(private_key))
    return r, s


def verify_message_hash(signature: Sequence[Any], message_hash: Any, public_key: Any) -> bool:
    r, s = deserialize_signature(signature)
    return verify_message_signature(to_felt(message_hash), [r, s], parse_int(public_key))


def serialize_signature(signature: Sequence[Any]) -> Dict[str, str]:
    r, s = deserialize_signature(signature)
    return {"r": hex(r), "s": hex(s)}


def deserialize_signature(stored: Any) -> Signature:
    """Accept (r, s), [r, s] or {"r": .., "s": ..}"""
    if isinstance(stored, dict):
        return parse_int(stored["r"]), parse_int(stored["s"])
    if len(stored) != 2:
        raise EncodingError(f"Signature must have exactly two elements, got {len(stored)}")
    return parse_int(stored[0]), parse_int(stored[1])


@dataclass(frozen=True)
class SignedPayload:
    """What the order book receives: hashes, signature and the signed message"""

    typed_data: TypedData
    signer: str
    struct_hash: int
    message_hash: int
    signature: Signature

    def signature_list(self) -> List[str]:
        return [hex(self.signature[0]), hex(self.signature[1])]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "signer": self.signer,
            "struct_hash": hex(self.struct_hash),
            "message_hash": hex(self.message_hash),
            "signature": self.signature_list(),
            "typed_data": self.typed_data.to_dict(),
        }


def sign_typed_data(typed_data: TypedData, account: str, private_key: Any) -> SignedPayload:
    """Hash typed_data for account and sign the message hash"""
    struct_hash = typed_data.struct_hash()
    message_hash = typed_data.message_hash(account)
    logger.debug("Signing %s %s for %s", typed_data.primary_type, hex(message_hash), account)
    return SignedPayload(
        typed_data=typed_data,
        signer=account,
        struct_hash=struct_hash,
        message_hash=message_hash,
        signature=sign_message_hash(message_hash, private_key),
    )
