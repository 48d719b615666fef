# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import hashlib

import pytest

from rentalytics.core.schema.identity import (
    build_listing_id,
    build_listing_ref,
    build_transaction_id,
    normalize_listing_name,
    slugify,
    stable_hash,
)


class TestStableHash:
    def test_matches_versioned_sha256(self):
        expected = hashlib.sha256(b"v1|acct-1::beach house").hexdigest()[:8]
        assert stable_hash("acct-1::beach house") == expected

    def test_length(self):
        assert len(stable_hash("x", length=16)) == 16

    def test_unknown_version_raises(self):
        with pytest.raises(ValueError, match="Unknown identity hash version"):
            stable_hash("x", version=99)

    def test_invalid_length_raises(self):
        with pytest.raises(ValueError):
            stable_hash("x", length=0)


class TestListingIdentity:
    def test_normalization(self):
        assert normalize_listing_name("  Beach   House\t") == "beach house"

    def test_unicode_composition_is_normalized(self):
        composed = "Caf\u00e9 Loft"
        decomposed = "Cafe\u0301 Loft"
        assert normalize_listing_name(composed) == normalize_listing_name(decomposed)

    def test_slugify(self):
        assert slugify("sunny loft #2 (downtown)") == "sunny-loft-2-downtown"

    def test_listing_id_format(self):
        listing_id = build_listing_id("acct-1", "beach house")
        prefix, _, digest = listing_id.rpartition("-")
        assert prefix == "acct-1-beach-house"
        assert len(digest) == 8

    def test_equivalent_names_share_an_id(self):
        first = build_listing_ref("acct-1", "Beach House")
        second = build_listing_ref("acct-1", "  beach  HOUSE ")
        assert first.listing_id == second.listing_id
        assert first.listing_name == "Beach House"
        assert second.normalized_listing_name == "beach house"

    def test_accounts_do_not_collide(self):
        assert (
            build_listing_ref("acct-1", "Beach House").listing_id
            != build_listing_ref("acct-2", "Beach House").listing_id
        )


class TestTransactionId:
    def test_order_and_spacing_insensitive(self):
        first = build_transaction_id("acct-1", {"Date": "01/02/2026", "Amount": "12.00"})
        second = build_transaction_id("acct-1", {"Amount": " 12.00 ", "Date": "01/02/2026"})
        assert first == second
        assert len(first) == 16

    def test_value_changes_fingerprint(self):
        first = build_transaction_id("acct-1", {"Amount": "12.00"})
        second = build_transaction_id("acct-1", {"Amount": "12.01"})
        assert first != second
