"""
SNIP-12 (revision 1) typed structured data

Each protocol generation gets one immutable TypedDataSchema: a static table of
struct name -> ordered field declarations. Encoded type strings and their type
hashes are derived once when the schema is built and never change afterwards.

    domain_hash  = Poseidon(type_hash(StarknetDomain), <domain fields>)
    struct_hash  = Poseidon(type_hash(T), <T fields in declared order>)
    message_hash = Poseidon('StarkNet Message', domain_hash, account, struct_hash)

Type signature grammar:

    "TypeName"("field1":"type1","field2":"type2",...)"Dep"("low":"u128",...)

Referenced struct types (u256 included) are appended after the primary type,
sorted by name. A u256 field is encoded as the struct hash of its {low, high}
sub-struct, never as two inline felts.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Tuple

from . import hashing
from .config import (
    DOMAIN_NAME,
    DOMAIN_REVISION,
    DOMAIN_VERSION,
    MATCHING_DOMAIN_VERSION,
    STARKNET_MESSAGE_PREFIX,
)
from .errors import EncodingError, RangeError, UnknownTypeError
from .felt import U128_BOUND, encode_shortstring, parse_bool, parse_felt, parse_int, to_felt, to_u256

logger = logging.getLogger(__name__)

DOMAIN_TYPE = "StarknetDomain"

BASIC_TYPES = frozenset({"felt", "shortstring", "ContractAddress", "ClassHash", "u128", "bool"})

# Preset struct types of revision 1, always available to every schema
PRESET_TYPES = {
    "u256": (("low", "u128"), ("high", "u128")),
}

MESSAGE_PREFIX = encode_shortstring(STARKNET_MESSAGE_PREFIX)


@dataclass(frozen=True)
class TypeField:
    name: str
    type: str


class TypedDataSchema:
    """Static type table for one set of signable message kinds"""

    def __init__(self, types: Mapping[str, Sequence[Tuple[str, str]]]):
        if DOMAIN_TYPE not in types:
            raise UnknownTypeError(f"Schema must declare {DOMAIN_TYPE}")
        table = {name: tuple(TypeField(n, t) for n, t in fields) for name, fields in types.items()}
        for name, fields in PRESET_TYPES.items():
            table[name] = tuple(TypeField(n, t) for n, t in fields)
        self._types = MappingProxyType(table)

        # Derive every signature up front so a broken table fails at import
        self._encoded = MappingProxyType({name: self._encode_type(name) for name in table})
        self._hashes = MappingProxyType(
            {name: hashing.type_hash(encoded) for name, encoded in self._encoded.items()}
        )

    @property
    def type_names(self) -> Tuple[str, ...]:
        return tuple(self._types)

    def fields(self, type_name: str) -> Tuple[TypeField, ...]:
        try:
            return self._types[type_name]
        except KeyError:
            raise UnknownTypeError(f"Type {type_name!r} is not defined") from None

    def dependencies(self, type_name: str) -> List[str]:
        """Struct types referenced (transitively) by type_name, sorted by name"""
        found: Set[str] = set()
        self._collect_dependencies(type_name, found)
        found.discard(type_name)
        return sorted(found)

    def _collect_dependencies(self, type_name: str, found: Set[str]):
        for f in self.fields(type_name):
            if f.type in BASIC_TYPES or f.type in found:
                continue
            if f.type not in self._types:
                raise UnknownTypeError(
                    f"Type {f.type!r} referenced by {type_name}.{f.name} is not defined"
                )
            found.add(f.type)
            self._collect_dependencies(f.type, found)

    def _encode_type(self, type_name: str) -> str:
        parts = []
        for name in [type_name] + self.dependencies(type_name):
            members = ",".join(f'"{f.name}":"{f.type}"' for f in self.fields(name))
            parts.append(f'"{name}"({members})')
        return "".join(parts)

    def encode_type(self, type_name: str) -> str:
        try:
            return self._encoded[type_name]
        except KeyError:
            raise UnknownTypeError(f"Type {type_name!r} is not defined") from None

    def type_hash(self, type_name: str) -> int:
        try:
            return self._hashes[type_name]
        except KeyError:
            raise UnknownTypeError(f"Type {type_name!r} is not defined") from None

    def encode_value(self, type_name: str, value: Any) -> int:
        if type_name in ("felt", "shortstring"):
            return parse_felt(value)
        if type_name in ("ContractAddress", "ClassHash"):
            return to_felt(value)
        if type_name == "u128":
            n = parse_int(value)
            if not 0 <= n < U128_BOUND:
                raise RangeError(f"Value out of u128 range: {n}")
            return n
        if type_name == "bool":
            return int(parse_bool(value))
        if type_name == "u256" and not isinstance(value, Mapping):
            low, high = to_u256(value)
            value = {"low": low, "high": high}
        if type_name in self._types:
            if not isinstance(value, Mapping):
                raise EncodingError(f"Struct {type_name} expects a mapping, got {value!r}")
            return self.struct_hash(type_name, value)
        raise UnknownTypeError(f"Type {type_name!r} is not defined")

    def encode_data(self, type_name: str, data: Mapping[str, Any]) -> List[int]:
        """[type_hash, field_0, field_1, ...] in declared field order"""
        encoded = [self.type_hash(type_name)]
        for f in self.fields(type_name):
            if f.name not in data:
                raise EncodingError(f"{type_name} is missing field {f.name!r}")
            try:
                encoded.append(self.encode_value(f.type, data[f.name]))
            except EncodingError as exc:
                raise type(exc)(f"{type_name}.{f.name}: {exc}") from exc
        return encoded

    def struct_hash(self, type_name: str, data: Mapping[str, Any]) -> int:
        return hashing.struct_hash(self.encode_data(type_name, data))

    def domain_hash(self, domain: Mapping[str, Any]) -> int:
        return self.struct_hash(DOMAIN_TYPE, domain)

    def message_hash(self, primary_type: str, message: Mapping[str, Any],
                     domain: Mapping[str, Any], account: Any) -> int:
        domain_hash = self.domain_hash(domain)
        struct_hash = self.struct_hash(primary_type, message)
        result = hashing.struct_hash([MESSAGE_PREFIX, domain_hash, to_felt(account), struct_hash])
        logger.debug(
            "%s message hash: domain=%s struct=%s account=%s -> %s",
            primary_type, hex(domain_hash), hex(struct_hash), account, hex(result),
        )
        return result

    def types_dict(self, primary_type: str) -> Dict[str, List[Dict[str, str]]]:
        """JSON `types` object for a primary type: domain, primary, then dependencies"""
        names = [DOMAIN_TYPE, primary_type] + self.dependencies(primary_type)
        return {
            name: [{"name": f.name, "type": f.type} for f in self.fields(name)]
            for name in names
        }


# --- Protocol schemas ------------------------------------------------------

SHORTSTRING_DOMAIN = (
    ("name", "shortstring"),
    ("version", "shortstring"),
    ("chainId", "shortstring"),
    ("revision", "shortstring"),
)

INSCRIPTION_ORDER_FIELDS = (
    ("borrower", "ContractAddress"),
    ("debt_hash", "felt"),
    ("interest_hash", "felt"),
    ("collateral_hash", "felt"),
    ("debt_count", "u128"),
    ("interest_count", "u128"),
    ("collateral_count", "u128"),
    ("duration", "u128"),
    ("deadline", "u128"),
    ("multi_lender", "bool"),
    ("nonce", "felt"),
)

LEND_OFFER_FIELDS_V0 = (
    ("order_hash", "felt"),
    ("lender", "ContractAddress"),
    ("issued_debt_percentage", "u256"),
    ("nonce", "felt"),
)

LEND_OFFER_FIELDS = LEND_OFFER_FIELDS_V0 + (("lender_commitment", "felt"),)

SIGNED_ORDER_FIELDS = (
    ("maker", "ContractAddress"),
    ("allowed_taker", "ContractAddress"),
    ("inscription_id", "u256"),
    ("bps", "u256"),
    ("deadline", "felt"),
    ("nonce", "felt"),
    ("min_fill_bps", "u256"),
)

MATCHING_DOMAIN = (
    ("name", "shortstring"),
    ("chainId", "shortstring"),
    ("version", "shortstring"),
)

LOAN_SCHEMA = TypedDataSchema({
    DOMAIN_TYPE: SHORTSTRING_DOMAIN,
    "InscriptionOrder": INSCRIPTION_ORDER_FIELDS,
    "LendOffer": LEND_OFFER_FIELDS,
})

# LendOffer as signed before lender_commitment existed
LOAN_SCHEMA_V0 = TypedDataSchema({
    DOMAIN_TYPE: SHORTSTRING_DOMAIN,
    "InscriptionOrder": INSCRIPTION_ORDER_FIELDS,
    "LendOffer": LEND_OFFER_FIELDS_V0,
})

MATCHING_SCHEMA = TypedDataSchema({
    DOMAIN_TYPE: MATCHING_DOMAIN,
    "SignedOrder": SIGNED_ORDER_FIELDS,
})


@dataclass(frozen=True)
class StarknetDomain:
    chain_id: str
    name: str = DOMAIN_NAME
    version: str = DOMAIN_VERSION
    revision: str = DOMAIN_REVISION

    def to_dict(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chain_id,
            "revision": self.revision,
        }


def loan_domain(chain_id: str) -> StarknetDomain:
    return StarknetDomain(chain_id=chain_id)


def matching_domain(chain_id: str) -> StarknetDomain:
    return StarknetDomain(chain_id=chain_id, version=MATCHING_DOMAIN_VERSION)


@dataclass(frozen=True)
class TypedData:
    """A signable message: schema, primary type, domain and message values"""

    schema: TypedDataSchema = field(repr=False)
    primary_type: str
    domain: Dict[str, Any]
    message: Dict[str, Any]

    def struct_hash(self) -> int:
        return self.schema.struct_hash(self.primary_type, self.message)

    def domain_hash(self) -> int:
        return self.schema.domain_hash(self.domain)

    def message_hash(self, account: Any) -> int:
        return self.schema.message_hash(self.primary_type, self.message, self.domain, account)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "types": self.schema.types_dict(self.primary_type),
            "primaryType": self.primary_type,
            "domain": dict(self.domain),
            "message": dict(self.message),
        }


def get_message_hash(typed_data: TypedData, account: Any, domain: Optional[StarknetDomain] = None) -> int:
    """Message hash of typed_data, optionally rebound to another domain"""
    if domain is None:
        return typed_data.message_hash(account)
    return typed_data.schema.message_hash(
        typed_data.primary_type, typed_data.message, domain.to_dict(), account
    )
