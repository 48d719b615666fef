# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base Pydantic model with common configuration.

    Immutable models for every record that crosses the library boundary.
    Derived views are rebuilt on each call, never mutated in place.
    """

    model_config = ConfigDict(
        frozen=True,  # Immutable models; accumulators live in external objects
        extra="forbid",  # Catches typos and missing field definitions immediately
        use_enum_values=False,
    )
