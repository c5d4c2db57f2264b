"""
Privacy pool primitives

Note commitments hide who owns how many shares of an inscription; nullifiers
mark a note as spent without revealing which commitment it belongs to. Both
hashes start with their own short-string domain tag, mirroring the Cairo
COMMITMENT_DOMAIN / NULLIFIER_DOMAIN constants.
"""

import secrets
from dataclasses import dataclass
from typing import Any, List, Optional

from .config import COMMITMENT_DOMAIN_TAG, NULLIFIER_DOMAIN_TAG
from .felt import encode_shortstring, parse_int, to_felt, to_u256
from .hashing import struct_hash

COMMITMENT_DOMAIN = encode_shortstring(COMMITMENT_DOMAIN_TAG)
NULLIFIER_DOMAIN = encode_shortstring(NULLIFIER_DOMAIN_TAG)

# 31 random bytes are always below the field prime, no rejection sampling needed
SALT_BYTES = 31


def compute_commitment(owner: Any, inscription_id: Any, shares: Any, salt: Any) -> int:
    """Poseidon(domain, owner, id.low, id.high, shares.low, shares.high, salt)"""
    id_low, id_high = to_u256(inscription_id)
    shares_low, shares_high = to_u256(shares)
    return struct_hash([
        COMMITMENT_DOMAIN,
        owner,
        id_low,
        id_high,
        shares_low,
        shares_high,
        salt,
    ])


def compute_nullifier(commitment: Any, owner_secret: Any) -> int:
    """Poseidon(domain, commitment, owner_secret)"""
    return struct_hash([NULLIFIER_DOMAIN, commitment, owner_secret])


def hash_pair(left: Any, right: Any) -> int:
    """Merkle internal node: Poseidon(left, right), not commutative"""
    return struct_hash([left, right])


def generate_salt() -> int:
    return int.from_bytes(secrets.token_bytes(SALT_BYTES), "big")


@dataclass(frozen=True)
class PrivateNote:
    owner: str
    inscription_id: int
    shares: int
    salt: int
    commitment: int

    def nullifier(self, owner_secret: Any) -> int:
        return compute_nullifier(self.commitment, owner_secret)

    def to_dict(self):
        return {
            "owner": hex(to_felt(self.owner)),
            "inscription_id": str(self.inscription_id),
            "shares": str(self.shares),
            "salt": hex(self.salt),
            "commitment": hex(self.commitment),
        }


def create_private_note(owner: str, inscription_id: Any, shares: Any,
                        salt: Optional[Any] = None) -> PrivateNote:
    """Build a note, generating a fresh salt when none is given"""
    note_salt = generate_salt() if salt is None else to_felt(salt)
    inscription_id = parse_int(inscription_id)
    shares = parse_int(shares)
    return PrivateNote(
        owner=owner,
        inscription_id=inscription_id,
        shares=shares,
        salt=note_salt,
        commitment=compute_commitment(owner, inscription_id, shares, note_salt),
    )


@dataclass(frozen=True)
class PrivateRedeemRequest:
    """Matches the Cairo PrivateRedeemRequest struct"""

    root: int
    inscription_id: int
    shares: int
    nullifier: int
    recipient: str
    # Zero on a full redemption
    change_commitment: int = 0

    def to_calldata(self) -> List[int]:
        return [
            to_felt(self.root),
            *to_u256(self.inscription_id),
            *to_u256(self.shares),
            to_felt(self.nullifier),
            to_felt(self.change_commitment),
            to_felt(self.recipient),
        ]
