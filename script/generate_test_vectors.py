#!/usr/bin/env python3
"""
SNIP-12 test vector generator for the Stela contracts

Recomputes every hash in test/test_vectors/snip12_vectors.json from its fixture
inputs. Pinned values are never silently replaced: a mismatch is reported and the
script exits non-zero unless --force is given.

Usage:
    python3 script/generate_test_vectors.py [--force] [--check]

Options:
    --force: Overwrite pinned values that no longer match
    --check: Only compare, never write the file
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List

from stela.assets import Asset, hash_assets
from stela.orders import InscriptionOrder, LendOffer, SignedOrder

# Get the project root directory
PROJECT_ROOT = Path(__file__).resolve().parents[1]
VECTORS_PATH = PROJECT_ROOT / "test/test_vectors/snip12_vectors.json"


def load_vectors() -> Dict[str, Any]:
    with open(VECTORS_PATH, "r") as f:
        return json.load(f)


def compare(label: str, pinned: str, computed: int, mismatches: List[str]) -> str:
    value = hex(computed)
    if pinned and int(pinned, 16) != computed:
        print(f"❌ {label}: pinned {pinned}, computed {value}")
        mismatches.append(label)
    else:
        print(f"✅ {label}: {value}")
    return value


def regenerate(vectors: Dict[str, Any], mismatches: List[str]) -> Dict[str, Any]:
    chain_id = vectors["chain_id"]

    for vector in vectors["hash_assets"]:
        assets = [Asset.from_dict(a) for a in vector["assets"]]
        vector["expected"] = compare(
            f"hash_assets[{vector['name']}]", vector.get("expected"), hash_assets(assets), mismatches
        )

    section = vectors["inscription_order"]
    order = InscriptionOrder.from_dict(section["order"])
    typed = order.typed_data(chain_id)
    order_hash = typed.message_hash(order.borrower)
    section["expected_struct_hash"] = compare(
        "InscriptionOrder struct hash", section.get("expected_struct_hash"), typed.struct_hash(), mismatches
    )
    section["expected_message_hash"] = compare(
        "InscriptionOrder message hash", section.get("expected_message_hash"), order_hash, mismatches
    )

    # LendOffer depends on the order's message hash
    section = vectors["lend_offer"]
    public = LendOffer(
        order_hash=order_hash,
        lender=section["lender"],
        issued_debt_percentage=section["issued_debt_percentage"],
        nonce=section["nonce"],
    )
    private = LendOffer(
        order_hash=order_hash,
        lender=section["lender"],
        issued_debt_percentage=section["issued_debt_percentage"],
        nonce=section["nonce"],
        lender_commitment=section["private_commitment"],
    )
    section["expected_message_hash"] = compare(
        "LendOffer message hash", section.get("expected_message_hash"),
        public.message_hash(chain_id), mismatches,
    )
    section["expected_private_message_hash"] = compare(
        "LendOffer (private) message hash", section.get("expected_private_message_hash"),
        private.message_hash(chain_id), mismatches,
    )

    section = vectors["signed_order"]
    signed_order = SignedOrder.from_dict(section["order"])
    section["expected_message_hash"] = compare(
        "SignedOrder message hash", section.get("expected_message_hash"),
        signed_order.message_hash(chain_id), mismatches,
    )
    return vectors


def main():
    parser = argparse.ArgumentParser(description="Regenerate Stela SNIP-12 test vectors")
    parser.add_argument("--force", action="store_true", help="Overwrite mismatching pinned values")
    parser.add_argument("--check", action="store_true", help="Compare only, do not write")
    args = parser.parse_args()

    print(f"Loading vectors from {VECTORS_PATH}")
    mismatches: List[str] = []
    vectors = regenerate(load_vectors(), mismatches)

    if mismatches and not args.force:
        print(f"\n❌ {len(mismatches)} pinned value(s) drifted, refusing to overwrite (use --force)")
        sys.exit(1)
    if args.check:
        print("\n✅ All pinned vectors match")
        return

    with open(VECTORS_PATH, "w") as f:
        json.dump(vectors, f, indent=2)
        f.write("\n")
    print(f"\n✅ Vectors written to {VECTORS_PATH}")


if __name__ == "__main__":
    main()
