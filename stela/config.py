# Stela SNIP-12 configuration
# Domain separator values and protocol constants shared with the Cairo contract

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Stark field prime (felt252 modulus)
FIELD_PRIME = 2**251 + 17 * 2**192 + 1

# Domain parameters, must match the contract's SNIP12Metadata
DOMAIN_NAME = "Stela"
DOMAIN_VERSION = "v1"
DOMAIN_REVISION = "1"

# The order-book (matching service) domain uses its own version string
MATCHING_DOMAIN_VERSION = "1"

# Fixed prefix of every SNIP-12 message hash
STARKNET_MESSAGE_PREFIX = "StarkNet Message"

# Chain ids are short strings
CHAIN_IDS = {
    "sepolia": "SN_SEPOLIA",
    "mainnet": "SN_MAIN",
}

# Deployed Stela protocol contract per network
STELA_ADDRESS = {
    "sepolia": "0x006885f85de0e79efc7826e2ca19ef8a13e5e4516897ad52dc505723f8ce6b90",
    "mainnet": "0x0",
}

VALID_NETWORKS = ("sepolia", "mainnet")
DEFAULT_NETWORK = "sepolia"

DEFAULT_RPC_URL = "https://api.cartridge.gg/x/starknet/sepolia"
DEFAULT_API_BASE = "https://stela-dapp.xyz/api"

# Maximum basis points (100%)
MAX_BPS = 10_000

# Virtual share offset used in share calculations (1e16)
VIRTUAL_SHARE_OFFSET = 10_000_000_000_000_000

# Privacy pool domain tags (Cairo short strings)
COMMITMENT_DOMAIN_TAG = "STELA_COMMITMENT_V1"
NULLIFIER_DOMAIN_TAG = "STELA_NULLIFIER_V1"


def resolve_network(raw: Optional[str]) -> str:
    """Validate a NETWORK value, defaulting to sepolia"""
    trimmed = (raw or "").strip()
    if trimmed in VALID_NETWORKS:
        return trimmed
    if trimmed:
        logger.warning('Invalid NETWORK "%s", falling back to %s', trimmed, DEFAULT_NETWORK)
    return DEFAULT_NETWORK


@dataclass(frozen=True)
class Settings:
    network: str
    chain_id: str
    rpc_url: str
    api_base: str
    stela_address: str
    account_address: Optional[str] = None
    private_key: Optional[str] = None


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Load runtime settings from the environment (and a .env file if present)"""
    load_dotenv(env_file)
    network = resolve_network(os.getenv("NETWORK"))
    return Settings(
        network=network,
        chain_id=os.getenv("CHAIN_ID") or CHAIN_IDS[network],
        rpc_url=os.getenv("RPC_URL") or DEFAULT_RPC_URL,
        api_base=os.getenv("API_BASE") or DEFAULT_API_BASE,
        stela_address=os.getenv("STELA_ADDRESS") or STELA_ADDRESS[network],
        account_address=os.getenv("ACCOUNT_ADDRESS"),
        private_key=os.getenv("PRIVATE_KEY"),
    )
