#!/usr/bin/env python3
"""
Sign an off-chain LendOffer against a pending order.

Usage:
    python3 script/sign_offer.py --order-hash 0x... [--bps 10000] [--nonce 0] [--commitment 0x0]

Reads ACCOUNT_ADDRESS and PRIVATE_KEY (and optionally NETWORK / CHAIN_ID) from
the environment or a .env file, prints the JSON payload for the order book.
"""

import argparse
import json
import sys

from stela.config import MAX_BPS, load_settings
from stela.errors import StelaError
from stela.orders import LendOffer
from stela.signature import get_public_key, sign_typed_data, verify_message_hash


def main():
    parser = argparse.ArgumentParser(description="Sign a Stela LendOffer")
    parser.add_argument("--order-hash", required=True, help="Message hash of the InscriptionOrder")
    parser.add_argument("--bps", default=str(MAX_BPS), help="issued_debt_percentage in basis points")
    parser.add_argument("--nonce", default="0")
    parser.add_argument("--commitment", default="0", help="Privacy commitment, 0 for a public offer")
    parser.add_argument("--env-file", default=None)
    args = parser.parse_args()

    settings = load_settings(args.env_file)
    if not settings.account_address or not settings.private_key:
        print("❌ Missing ACCOUNT_ADDRESS or PRIVATE_KEY in environment")
        sys.exit(1)

    try:
        offer = LendOffer(
            order_hash=args.order_hash,
            lender=settings.account_address,
            issued_debt_percentage=args.bps,
            nonce=args.nonce,
            lender_commitment=args.commitment,
        )
        payload = sign_typed_data(offer.typed_data(settings.chain_id), settings.account_address,
                                  settings.private_key)
    except StelaError as e:
        # Never submit an offer whose hash we could not build
        print(f"❌ {e}")
        sys.exit(1)

    public_key = get_public_key(settings.private_key)
    if not verify_message_hash(payload.signature, payload.message_hash, public_key):
        print("❌ Signature does not verify against the signer's public key")
        sys.exit(1)

    print(f"✅ Signed LendOffer on {settings.chain_id}")
    print(f"Message hash: {hex(payload.message_hash)}")
    body = payload.to_dict()
    body["offer"] = offer.to_dict()
    print(json.dumps(body, indent=2))


if __name__ == "__main__":
    main()
