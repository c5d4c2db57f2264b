"""
Asset lists

An Asset mirrors the Cairo Asset struct. hash_assets() reproduces the contract's
hash_assets(): Poseidon over [len, then per asset: address, type, value.low,
value.high, token_id.low, token_id.high]. Order is part of the agreement, so two
lists holding the same assets in a different order hash differently.
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, List, Sequence, Union

from .errors import EncodingError
from .felt import normalize_address, parse_int, to_felt, to_u256
from .hashing import struct_hash

logger = logging.getLogger(__name__)


class AssetType(IntEnum):
    ERC20 = 0
    ERC721 = 1
    ERC1155 = 2
    ERC4626 = 3

    @classmethod
    def parse(cls, value: Union["AssetType", str, int]) -> "AssetType":
        if isinstance(value, AssetType):
            return value
        if isinstance(value, str) and value in cls.__members__:
            return cls[value]
        try:
            return cls(parse_int(value))
        except (EncodingError, ValueError):
            raise EncodingError(f"Unknown asset type: {value!r}") from None


@dataclass(frozen=True)
class Asset:
    asset_address: str
    asset_type: AssetType
    value: int = 0
    token_id: int = 0

    def __post_init__(self):
        # Normalize once so the hash input never depends on caller formatting
        object.__setattr__(self, "asset_type", AssetType.parse(self.asset_type))
        object.__setattr__(self, "value", parse_int(self.value))
        object.__setattr__(self, "token_id", parse_int(self.token_id))
        to_felt(self.asset_address)
        to_u256(self.value)
        to_u256(self.token_id)

    def to_felts(self) -> List[int]:
        """Serialized Cairo form: address, type, value (low, high), token_id (low, high)"""
        return [
            to_felt(self.asset_address),
            int(self.asset_type),
            *to_u256(self.value),
            *to_u256(self.token_id),
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "asset_address": normalize_address(self.asset_address),
            "asset_type": self.asset_type.name,
            "value": str(self.value),
            "token_id": str(self.token_id),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Asset":
        return cls(
            asset_address=data["asset_address"],
            asset_type=data["asset_type"],
            value=data.get("value", 0),
            token_id=data.get("token_id", 0),
        )


def serialize_assets(assets: Sequence[Asset]) -> List[int]:
    """Length-prefixed flat felt encoding of an asset list"""
    elements = [len(assets)]
    for asset in assets:
        elements.extend(asset.to_felts())
    return elements


def hash_assets(assets: Sequence[Asset]) -> int:
    """Poseidon hash of an asset list, matches Cairo's hash_assets()"""
    result = struct_hash(serialize_assets(assets))
    logger.debug("hash_assets(%d assets) = %s", len(assets), hex(result))
    return result
