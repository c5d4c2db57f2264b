import json
import unittest
from pathlib import Path

from stela.assets import Asset, AssetType
from stela.errors import EncodingError, RangeError, UnknownTypeError
from stela.felt import encode_shortstring
from stela.hashing import struct_hash, type_hash
from stela.orders import InscriptionOrder, LendOffer, SignedOrder
from stela.typed_data import (
    LOAN_SCHEMA,
    LOAN_SCHEMA_V0,
    MATCHING_SCHEMA,
    MESSAGE_PREFIX,
    StarknetDomain,
    TypedDataSchema,
    get_message_hash,
)

VECTORS_PATH = Path(__file__).resolve().parent / "test_vectors" / "snip12_vectors.json"
with open(VECTORS_PATH, "r") as f:
    VECTORS = json.load(f)

CHAIN_ID = VECTORS["chain_id"]
BORROWER = VECTORS["addresses"]["ETH"]
LENDER = VECTORS["addresses"]["STRK"]
ORDER_VECTOR = VECTORS["inscription_order"]
OFFER_VECTOR = VECTORS["lend_offer"]
SIGNED_ORDER_VECTOR = VECTORS["signed_order"]


def fixture_order(**overrides):
    data = dict(ORDER_VECTOR["order"])
    data.update(overrides)
    return InscriptionOrder.from_dict(data)


class EncodeTypeTests(unittest.TestCase):
    def test_inscription_order_signature(self):
        self.assertEqual(
            LOAN_SCHEMA.encode_type("InscriptionOrder"),
            '"InscriptionOrder"("borrower":"ContractAddress","debt_hash":"felt","interest_hash":"felt",'
            '"collateral_hash":"felt","debt_count":"u128","interest_count":"u128","collateral_count":"u128",'
            '"duration":"u128","deadline":"u128","multi_lender":"bool","nonce":"felt")',
        )

    def test_lend_offer_appends_u256(self):
        self.assertEqual(
            LOAN_SCHEMA.encode_type("LendOffer"),
            '"LendOffer"("order_hash":"felt","lender":"ContractAddress","issued_debt_percentage":"u256",'
            '"nonce":"felt","lender_commitment":"felt")"u256"("low":"u128","high":"u128")',
        )

    def test_legacy_lend_offer_is_a_distinct_type(self):
        self.assertEqual(
            LOAN_SCHEMA_V0.encode_type("LendOffer"),
            '"LendOffer"("order_hash":"felt","lender":"ContractAddress","issued_debt_percentage":"u256",'
            '"nonce":"felt")"u256"("low":"u128","high":"u128")',
        )
        self.assertNotEqual(LOAN_SCHEMA_V0.type_hash("LendOffer"), LOAN_SCHEMA.type_hash("LendOffer"))

    def test_signed_order_signature(self):
        self.assertEqual(
            MATCHING_SCHEMA.encode_type("SignedOrder"),
            '"SignedOrder"("maker":"ContractAddress","allowed_taker":"ContractAddress","inscription_id":"u256",'
            '"bps":"u256","deadline":"felt","nonce":"felt","min_fill_bps":"u256")"u256"("low":"u128","high":"u128")',
        )

    def test_matching_domain_declares_three_fields(self):
        self.assertEqual(
            MATCHING_SCHEMA.encode_type("StarknetDomain"),
            '"StarknetDomain"("name":"shortstring","chainId":"shortstring","version":"shortstring")',
        )

    def test_type_hash_is_keccak_of_signature(self):
        self.assertEqual(
            LOAN_SCHEMA.type_hash("InscriptionOrder"),
            type_hash(LOAN_SCHEMA.encode_type("InscriptionOrder")),
        )

    def test_dependencies_are_sorted(self):
        schema = TypedDataSchema({
            "StarknetDomain": (("name", "shortstring"),),
            "Outer": (("zeta", "Zeta"), ("alpha", "Alpha")),
            "Zeta": (("v", "felt"),),
            "Alpha": (("v", "u256"),),
        })
        self.assertEqual(schema.dependencies("Outer"), ["Alpha", "Zeta", "u256"])
        self.assertEqual(
            schema.encode_type("Outer"),
            '"Outer"("zeta":"Zeta","alpha":"Alpha")"Alpha"("v":"u256")"Zeta"("v":"felt")"u256"("low":"u128","high":"u128")',
        )

    def test_unknown_nested_type_fails_at_construction(self):
        with self.assertRaises(UnknownTypeError):
            TypedDataSchema({
                "StarknetDomain": (("name", "shortstring"),),
                "Order": (("amount", "u512"),),
            })

    def test_unknown_primary_type(self):
        with self.assertRaises(UnknownTypeError):
            LOAN_SCHEMA.type_hash("Borrow")
        with self.assertRaises(UnknownTypeError):
            LOAN_SCHEMA.struct_hash("Borrow", {})


class InscriptionOrderHashTests(unittest.TestCase):
    def test_pinned_struct_hash(self):
        typed = fixture_order().typed_data(CHAIN_ID)
        self.assertEqual(typed.struct_hash(), int(ORDER_VECTOR["expected_struct_hash"], 16))

    def test_pinned_message_hash(self):
        order = fixture_order()
        self.assertEqual(order.message_hash(CHAIN_ID), int(ORDER_VECTOR["expected_message_hash"], 16))

    def test_message_hash_layout(self):
        typed = fixture_order().typed_data(CHAIN_ID)
        expected = struct_hash([
            encode_shortstring("StarkNet Message"),
            typed.domain_hash(),
            int(BORROWER, 16),
            typed.struct_hash(),
        ])
        self.assertEqual(MESSAGE_PREFIX, encode_shortstring("StarkNet Message"))
        self.assertEqual(typed.message_hash(BORROWER), expected)

    def test_counts_follow_asset_lists(self):
        message = fixture_order().to_message()
        self.assertEqual(message["debt_count"], "1")
        self.assertEqual(message["interest_count"], "1")
        self.assertEqual(message["collateral_count"], "1")

    def test_nonce_changes_hash(self):
        self.assertNotEqual(fixture_order().message_hash(CHAIN_ID), fixture_order(nonce="43").message_hash(CHAIN_ID))

    def test_to_dict_shape(self):
        data = fixture_order().typed_data(CHAIN_ID).to_dict()
        self.assertEqual(data["primaryType"], "InscriptionOrder")
        self.assertEqual(
            data["domain"], {"name": "Stela", "version": "v1", "chainId": CHAIN_ID, "revision": "1"}
        )
        self.assertEqual(list(data["types"]), ["StarknetDomain", "InscriptionOrder"])
        self.assertEqual(
            [f["name"] for f in data["types"]["InscriptionOrder"]],
            list(data["message"]),
        )

    def test_json_round_trip_preserves_hash(self):
        order = fixture_order()
        restored = InscriptionOrder.from_dict(json.loads(json.dumps(order.to_dict())))
        self.assertEqual(restored.message_hash(CHAIN_ID), order.message_hash(CHAIN_ID))

    def test_duration_over_u128_rejected(self):
        with self.assertRaises(RangeError):
            fixture_order(duration=str(2**128)).message_hash(CHAIN_ID)

    def test_negative_deadline_rejected(self):
        with self.assertRaises(EncodingError):
            fixture_order(deadline="-1").message_hash(CHAIN_ID)

    def test_multi_lender_string_forms(self):
        expected = fixture_order(multi_lender=False).message_hash(CHAIN_ID)
        for value in ("false", "0", 0):
            order = fixture_order(multi_lender=value)
            self.assertIs(order.multi_lender, False)
            self.assertEqual(order.message_hash(CHAIN_ID), expected)
        self.assertEqual(
            fixture_order(multi_lender="true").message_hash(CHAIN_ID),
            fixture_order(multi_lender=True).message_hash(CHAIN_ID),
        )
        self.assertNotEqual(fixture_order(multi_lender=True).message_hash(CHAIN_ID), expected)

    def test_invalid_multi_lender_rejected(self):
        for value in ("maybe", 2, None):
            with self.assertRaises(EncodingError):
                fixture_order(multi_lender=value)

    def test_asset_mappings_are_coerced(self):
        order = fixture_order()
        from_mappings = InscriptionOrder(
            borrower=BORROWER,
            debt_assets=ORDER_VECTOR["order"]["debt_assets"],
            interest_assets=ORDER_VECTOR["order"]["interest_assets"],
            collateral_assets=ORDER_VECTOR["order"]["collateral_assets"],
            duration=86400,
            deadline=1700000000,
            nonce=42,
        )
        self.assertIsInstance(from_mappings.debt_assets[0], Asset)
        self.assertEqual(from_mappings.message_hash(CHAIN_ID), order.message_hash(CHAIN_ID))

    def test_malformed_asset_lists_rejected(self):
        asset = ORDER_VECTOR["order"]["debt_assets"][0]
        incomplete = {"asset_address": asset["asset_address"]}
        for debt_assets in ([incomplete], ["0x1"], asset, None):
            with self.assertRaises(EncodingError):
                InscriptionOrder(BORROWER, debt_assets, [], [], 86400, 1700000000)


class DomainBindingTests(unittest.TestCase):
    def setUp(self):
        self.typed = fixture_order().typed_data(CHAIN_ID)
        self.base = get_message_hash(self.typed, BORROWER, StarknetDomain(chain_id=CHAIN_ID))

    def test_default_domain_matches_explicit(self):
        self.assertEqual(self.base, self.typed.message_hash(BORROWER))

    def test_each_domain_field_changes_hash(self):
        variants = [
            StarknetDomain(chain_id=CHAIN_ID, name="Stelb"),
            StarknetDomain(chain_id=CHAIN_ID, version="v2"),
            StarknetDomain(chain_id="SN_MAIN"),
            StarknetDomain(chain_id=CHAIN_ID, revision="2"),
        ]
        for domain in variants:
            self.assertNotEqual(get_message_hash(self.typed, BORROWER, domain), self.base, domain)

    def test_signer_is_bound(self):
        self.assertNotEqual(self.typed.message_hash(LENDER), self.base)

    def test_domain_name_over_31_bytes_rejected(self):
        with self.assertRaises(RangeError):
            get_message_hash(self.typed, BORROWER, StarknetDomain(chain_id=CHAIN_ID, name="S" * 32))


class LendOfferHashTests(unittest.TestCase):
    def setUp(self):
        self.order_hash = fixture_order().message_hash(CHAIN_ID)
        self.offer = LendOffer(
            order_hash=self.order_hash,
            lender=LENDER,
            issued_debt_percentage=10_000,
            nonce=1,
        )

    def test_u256_encoded_as_nested_struct(self):
        typed = self.offer.typed_data(CHAIN_ID)
        u256_hash = struct_hash([type_hash('"u256"("low":"u128","high":"u128")'), 10_000, 0])
        expected = struct_hash([
            LOAN_SCHEMA.type_hash("LendOffer"),
            self.order_hash,
            int(LENDER, 16),
            u256_hash,
            1,
            0,
        ])
        self.assertEqual(typed.struct_hash(), expected)

        inline = struct_hash([
            LOAN_SCHEMA.type_hash("LendOffer"),
            self.order_hash,
            int(LENDER, 16),
            10_000,
            0,
            1,
            0,
        ])
        self.assertNotEqual(typed.struct_hash(), inline)

    def test_pinned_message_hash(self):
        self.assertEqual(
            self.offer.message_hash(CHAIN_ID), int(OFFER_VECTOR["expected_message_hash"], 16)
        )

    def test_pinned_private_message_hash(self):
        private = LendOffer(
            order_hash=self.order_hash,
            lender=OFFER_VECTOR["lender"],
            issued_debt_percentage=OFFER_VECTOR["issued_debt_percentage"],
            nonce=OFFER_VECTOR["nonce"],
            lender_commitment=OFFER_VECTOR["private_commitment"],
        )
        self.assertEqual(
            private.message_hash(CHAIN_ID), int(OFFER_VECTOR["expected_private_message_hash"], 16)
        )

    def test_message_payload(self):
        message = self.offer.to_message()
        self.assertEqual(message["issued_debt_percentage"], {"low": "10000", "high": "0"})
        self.assertEqual(message["lender_commitment"], "0x0")

    def test_deterministic(self):
        self.assertEqual(self.offer.message_hash(CHAIN_ID), self.offer.message_hash(CHAIN_ID))
        self.assertNotEqual(self.offer.message_hash(CHAIN_ID), 0)

    def test_commitment_changes_hash(self):
        private = LendOffer(
            order_hash=self.order_hash,
            lender=LENDER,
            issued_debt_percentage=10_000,
            nonce=1,
            lender_commitment="0xdeadbeef",
        )
        self.assertTrue(private.is_private)
        self.assertNotEqual(private.message_hash(CHAIN_ID), self.offer.message_hash(CHAIN_ID))

    def test_legacy_type_hashes_differently(self):
        self.assertNotEqual(
            self.offer.message_hash(CHAIN_ID, legacy=True), self.offer.message_hash(CHAIN_ID)
        )
        self.assertNotIn("lender_commitment", self.offer.to_message(legacy=True))

    def test_legacy_type_refuses_commitment(self):
        private = LendOffer(self.order_hash, LENDER, 10_000, 1, lender_commitment=5)
        with self.assertRaises(EncodingError):
            private.typed_data(CHAIN_ID, legacy=True)

    def test_missing_field_rejected(self):
        message = self.offer.to_message()
        del message["nonce"]
        with self.assertRaises(EncodingError):
            LOAN_SCHEMA.struct_hash("LendOffer", message)


class SignedOrderHashTests(unittest.TestCase):
    def setUp(self):
        self.order = SignedOrder(
            maker=BORROWER,
            allowed_taker="0x0",
            inscription_id="123",
            bps="5000",
            deadline=1772105000,
            nonce="0x1",
            min_fill_bps="1000",
        )

    def test_domain(self):
        domain = self.order.typed_data(CHAIN_ID).domain
        self.assertEqual(domain["version"], "1")
        self.assertEqual(domain["name"], "Stela")

    def test_domain_hash_uses_declared_fields(self):
        typed = self.order.typed_data(CHAIN_ID)
        expected = struct_hash([
            MATCHING_SCHEMA.type_hash("StarknetDomain"),
            encode_shortstring("Stela"),
            encode_shortstring(CHAIN_ID),
            1,
        ])
        self.assertEqual(typed.domain_hash(), expected)

    def test_separate_from_loan_domain(self):
        self.assertNotEqual(
            MATCHING_SCHEMA.type_hash("StarknetDomain"), LOAN_SCHEMA.type_hash("StarknetDomain")
        )

    def test_public_order(self):
        self.assertTrue(self.order.is_public)

    def test_json_round_trip(self):
        data = self.order.to_dict()
        self.assertEqual(data["inscription_id"], "123")
        self.assertEqual(data["nonce"], "0x1")
        self.assertEqual(data["deadline"], 1772105000)
        restored = SignedOrder.from_dict(data)
        self.assertEqual(restored.inscription_id, 123)
        self.assertEqual(restored.min_fill_bps, 1000)
        self.assertEqual(restored.message_hash(CHAIN_ID), self.order.message_hash(CHAIN_ID))

    def test_bps_change_changes_hash(self):
        other = SignedOrder.from_dict(dict(self.order.to_dict(), bps="5001"))
        self.assertNotEqual(other.message_hash(CHAIN_ID), self.order.message_hash(CHAIN_ID))

    def test_vector_message_hash_layout(self):
        order = SignedOrder.from_dict(SIGNED_ORDER_VECTOR["order"])
        u256_type = type_hash('"u256"("low":"u128","high":"u128")')

        def u256(value):
            return struct_hash([u256_type, value % 2**128, value // 2**128])

        struct = struct_hash([
            type_hash(
                '"SignedOrder"("maker":"ContractAddress","allowed_taker":"ContractAddress",'
                '"inscription_id":"u256","bps":"u256","deadline":"felt","nonce":"felt",'
                '"min_fill_bps":"u256")"u256"("low":"u128","high":"u128")'
            ),
            int(BORROWER, 16),
            0,
            u256(2**128 + 123),
            u256(5000),
            1700000000,
            42,
            u256(1000),
        ])
        domain = struct_hash([
            type_hash('"StarknetDomain"("name":"shortstring","chainId":"shortstring","version":"shortstring")'),
            encode_shortstring("Stela"),
            encode_shortstring(CHAIN_ID),
            1,
        ])
        expected = struct_hash([encode_shortstring("StarkNet Message"), domain, int(BORROWER, 16), struct])
        self.assertEqual(order.typed_data(CHAIN_ID).struct_hash(), struct)
        self.assertEqual(order.message_hash(CHAIN_ID), expected)

    def test_pinned_message_hash(self):
        pinned = SIGNED_ORDER_VECTOR.get("expected_message_hash")
        if not pinned:
            self.skipTest("run script/generate_test_vectors.py to pin the SignedOrder hash")
        order = SignedOrder.from_dict(SIGNED_ORDER_VECTOR["order"])
        self.assertEqual(order.message_hash(CHAIN_ID), int(pinned, 16))


class ValueEncodingTests(unittest.TestCase):
    def test_bool_forms(self):
        self.assertEqual(LOAN_SCHEMA.encode_value("bool", True), 1)
        self.assertEqual(LOAN_SCHEMA.encode_value("bool", "false"), 0)
        with self.assertRaises(EncodingError):
            LOAN_SCHEMA.encode_value("bool", 2)

    def test_u256_int_equals_struct_form(self):
        self.assertEqual(
            LOAN_SCHEMA.encode_value("u256", 2**128 + 3),
            LOAN_SCHEMA.encode_value("u256", {"low": "3", "high": "1"}),
        )

    def test_contract_address_must_be_numeric(self):
        with self.assertRaises(EncodingError):
            LOAN_SCHEMA.encode_value("ContractAddress", "alice")

    def test_unknown_value_type(self):
        with self.assertRaises(UnknownTypeError):
            LOAN_SCHEMA.encode_value("u64", 1)


if __name__ == "__main__":
    unittest.main()
