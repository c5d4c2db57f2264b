"""
Stela off-chain hashing core

SNIP-12 typed data, asset list hashing, privacy commitments, share math and
event decoding, bit-compatible with the Stela Cairo contracts.
"""

from .assets import Asset, AssetType, hash_assets, serialize_assets
from .config import FIELD_PRIME, MAX_BPS, VIRTUAL_SHARE_OFFSET, load_settings, resolve_network
from .errors import EncodingError, RangeError, StelaError, UnknownTypeError
from .events import SELECTORS, RawEvent, decode_event, decode_events
from .felt import (
    decode_shortstring,
    encode_shortstring,
    from_u256,
    id_to_fixed_hex,
    normalize_address,
    parse_amount,
    parse_bool,
    format_token_value,
    to_felt,
    to_u256,
)
from .hashing import get_selector_from_name, starknet_keccak, struct_hash, type_hash
from .inscription import InscriptionStatus, StoredInscription, compute_status, decode_stored_inscription
from .orders import (
    InscriptionOrder,
    LendOffer,
    SignedOrder,
    build_signed_order_typed_data,
    get_inscription_order_typed_data,
    get_lend_offer_typed_data,
)
from .privacy import (
    PrivateNote,
    PrivateRedeemRequest,
    compute_commitment,
    compute_nullifier,
    create_private_note,
    generate_salt,
    hash_pair,
)
from .shares import calculate_fee_shares, convert_to_shares, scale_by_percentage, shares_to_percentage
from .signature import SignedPayload, sign_message_hash, sign_typed_data, verify_message_hash
from .typed_data import LOAN_SCHEMA, LOAN_SCHEMA_V0, MATCHING_SCHEMA, StarknetDomain, TypedData, TypedDataSchema

__version__ = "0.1.0"
