# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Deterministic listing and transaction identifiers.

Identifiers must stay stable across runs, processes and reimplementations for
the same logical input, so they are derived from a versioned SHA-256 digest
rather than the interpreter's (salted) ``hash()``.

    listing_id = f"{account_id}-{slug(normalized_name)}-{hash8}"
    hash8      = stable_hash(f"{account_id}::{normalized_name}")
"""

from __future__ import annotations

import hashlib
import re
import unicodedata
from typing import Any, Callable, Dict, Mapping

from .records import ListingRef

IDENTITY_HASH_VERSION = 1

_HASHERS: Dict[int, Callable[..., Any]] = {
    1: hashlib.sha256,
}

_WHITESPACE = re.compile(r"\s+")


def stable_hash(value: str, length: int = 8, version: int = IDENTITY_HASH_VERSION) -> str:
    """
    Hex digest prefix of a versioned hash of ``value``.

    The version is mixed into the hashed payload, so bumping it changes every
    identifier deliberately instead of silently.

    Raises:
        ValueError: If the hash version is unknown or length is out of range
    """
    try:
        hasher = _HASHERS[version]
    except KeyError:
        raise ValueError(f"Unknown identity hash version: {version}") from None

    digest = hasher(f"v{version}|{value}".encode("utf-8")).hexdigest()
    if not 0 < length <= len(digest):
        raise ValueError(f"Hash length must be between 1 and {len(digest)}, got {length}")
    return digest[:length]


def normalize_listing_name(name: str) -> str:
    """Normalize a listing name: NFC, trimmed, whitespace collapsed, lowercase."""
    return _WHITESPACE.sub(" ", unicodedata.normalize("NFC", name).strip()).lower()


def slugify(normalized_name: str) -> str:
    """URL-safe slug of a normalized listing name."""
    slug = re.sub(r"[^a-z0-9\s-]", "", normalized_name)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def build_listing_id(account_id: str, normalized_name: str) -> str:
    slug = slugify(normalized_name)
    return f"{account_id}-{slug}-{stable_hash(f'{account_id}::{normalized_name}')}"


def build_listing_ref(account_id: str, listing_name: str) -> ListingRef:
    """
    Build a ``ListingRef`` from an account id and the raw listing name.

    Names differing only in case, spacing or Unicode composition map to the
    same listing.
    """
    normalized = normalize_listing_name(listing_name)
    return ListingRef(
        account_id=account_id,
        listing_name=listing_name,
        normalized_listing_name=normalized,
        listing_id=build_listing_id(account_id, normalized),
    )


def build_transaction_id(account_id: str, fields: Mapping[str, str]) -> str:
    """
    Deterministic fingerprint of a source row, used as the transaction id.

    Keys are sorted and values trimmed and whitespace-collapsed, so column
    order and cosmetic spacing do not change the fingerprint.
    """
    canonical = "|".join(
        f"{key}={_WHITESPACE.sub(' ', fields[key].strip())}" for key in sorted(fields)
    )
    return stable_hash(f"{account_id}|{canonical}", length=16)
