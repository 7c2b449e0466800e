from __future__ import annotations

import re
from typing import Optional

SENTINEL_VALUE = 0
# Counter values beyond a signed 32-bit int are treated as garbage.
SAMPLE_VALUE_MAX = 2**31 - 1

_DIGITS = re.compile(r"[0-9]+")


def parse_sample(raw: Optional[str]) -> Optional[int]:
    """Return the first run of decimal digits in ``raw`` or None when there is none."""
    if not raw:
        return None
    match = _DIGITS.search(raw)
    if match is None:
        return None
    value = int(match.group(0))
    if value > SAMPLE_VALUE_MAX:
        return None
    return value
