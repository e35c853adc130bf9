# Flexi FinSight - Financial reporting dashboard core for AbraFlexi companies
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Numeric helpers for Flexi FinSight.

AbraFlexi returns amounts either as JSON numbers or as locale-formatted
strings ("1 234,56"). This module normalizes both into floats and provides
the rounding convention applied to every published statement value.
"""

import math
from typing import Any

ROUNDING_EPSILON = 1e-9


def parse_number(value: Any) -> float:
    """Convert a raw AbraFlexi numeric field into a float.

    Accepted inputs:
        - int / float (NaN is treated as missing),
        - strings using ',' or '.' as decimal separator, optionally with
          spaces or non-breaking spaces as thousands separators.

    Anything else (None, empty strings, garbage) resolves to 0.0. This
    function never raises: a malformed amount must not abort a sync.

    Examples:
        "1 234,56" → 1234.56
        "12.5"     → 12.5
        "abc"      → 0.0
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            # JSON integers are unbounded; past ~1e308 they do not fit a float.
            return 0.0
        return 0.0 if math.isnan(number) or math.isinf(number) else number
    if isinstance(value, str):
        s = value.strip().replace(" ", "").replace("\u00a0", "")
        if not s:
            return 0.0
        if "," in s and "." in s:
            # The separator that appears last is the decimal one.
            if s.rfind(",") > s.rfind("."):
                s = s.replace(".", "")
            else:
                s = s.replace(",", "")
        s = s.replace(",", ".")
        try:
            number = float(s)
        except ValueError:
            return 0.0
        return 0.0 if math.isnan(number) or math.isinf(number) else number
    return 0.0


def round_amount(value: float) -> float:
    """Round a monetary amount to 2 decimals.

    The rule is ``floor((x + 1e-9) * 100 + 0.5) / 100``: half-up (towards
    +infinity) after nudging the value by a tiny epsilon so that binary
    representation error does not turn 10.005 into 10.00.

    Boundary behavior:
        round_amount(10.005)  → 10.01
        round_amount(-10.005) → -10.0
        round_amount(-0.001)  → 0.0   (never -0.0)
    """
    return math.floor((value + ROUNDING_EPSILON) * 100 + 0.5) / 100
