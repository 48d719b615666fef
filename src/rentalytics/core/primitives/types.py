# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from pydantic import Field
from typing_extensions import Annotated

# constrained types
MinorUnits = Annotated[int, Field(strict=True)]
NonNegativeInt = Annotated[int, Field(strict=True, ge=0)]
PositiveInt = Annotated[int, Field(strict=True, gt=0)]
PositiveFloat = Annotated[float, Field(gt=0)]
FloatBetween0And1 = Annotated[float, Field(ge=0, le=1)]

CurrencyCode = Annotated[str, Field(min_length=1)]
YearMonth = Annotated[str, Field(pattern=r"^\d{4}-(0[1-9]|1[0-2])$")]
