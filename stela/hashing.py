"""
Hash primitives

struct_hash: Poseidon sponge over field elements, used for every struct and list
hash. type_hash: starknet_keccak of a type signature (or event name), used only
for type identifiers and event selectors. The two are not interchangeable.
"""

import logging
from functools import lru_cache
from typing import Iterable, List

from eth_utils import keccak
from poseidon_py.poseidon_hash import poseidon_hash_many

from .felt import to_felt

logger = logging.getLogger(__name__)

MASK_250 = 2**250 - 1


def struct_hash(elements: Iterable) -> int:
    """Poseidon hash of an ordered sequence of field elements"""
    felts: List[int] = [to_felt(e) for e in elements]
    return poseidon_hash_many(felts)


def starknet_keccak(data: bytes) -> int:
    """Keccak-256 of data, truncated to the low 250 bits"""
    return int.from_bytes(keccak(data), "big") & MASK_250


@lru_cache(maxsize=None)
def type_hash(type_signature: str) -> int:
    """Type identifier of a SNIP-12 encoded type signature"""
    result = starknet_keccak(type_signature.encode("utf-8"))
    logger.debug("type_hash(%s) = %s", type_signature, hex(result))
    return result


def get_selector_from_name(name: str) -> int:
    """Entry point / event selector for a Cairo name"""
    return type_hash(name)
