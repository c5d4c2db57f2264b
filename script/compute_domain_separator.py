#!/usr/bin/env python3
"""
Compute the SNIP-12 domain hashes and type hashes for the Stela contracts
"""

import argparse
import sys

from stela.config import CHAIN_IDS, resolve_network
from stela.errors import StelaError
from stela.typed_data import LOAN_SCHEMA, LOAN_SCHEMA_V0, MATCHING_SCHEMA, loan_domain, matching_domain

SCHEMAS = [
    ("Loan (current)", LOAN_SCHEMA, loan_domain),
    ("Loan (pre-commitment LendOffer)", LOAN_SCHEMA_V0, loan_domain),
    ("Order book", MATCHING_SCHEMA, matching_domain),
]


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--network", default="sepolia", help="sepolia | mainnet")
    parser.add_argument("--chain-id", help="Override the chain id short string")
    args = parser.parse_args()

    chain_id = args.chain_id or CHAIN_IDS[resolve_network(args.network)]
    print("Computing Stela SNIP-12 hashes...")
    print(f"Chain ID: {chain_id}")

    try:
        for title, schema, make_domain in SCHEMAS:
            domain = make_domain(chain_id).to_dict()
            print(f"\n=== {title} ===")
            print(f"Domain: {domain}")
            print(f"DOMAIN_HASH = \"{hex(schema.domain_hash(domain))}\"")
            for type_name in schema.type_names:
                print(f"{type_name}:")
                print(f"  signature: {schema.encode_type(type_name)}")
                print(f"  type hash: {hex(schema.type_hash(type_name))}")
    except StelaError as e:
        print(f"❌ {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
