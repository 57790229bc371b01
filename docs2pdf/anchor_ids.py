"""
Anchor Identifiers
==================
Generates the fragment identifiers stamped onto every navigation node.

An id is ``id-`` followed by the low digits of a nanosecond clock and a
random base-36 tail.  The fixed letter prefix keeps ids valid as HTML ids
and CSS selectors (they must not start with a digit).  Collisions are not
checked: clock + 64 random bits is negligible for the thousands of nodes a
documentation site has.  Revisit if this is ever used for millions of ids.
"""

from __future__ import annotations

import random
import re
import time

ANCHOR_PREFIX = "id-"

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
_RANDOM_BITS = 64
_TIME_DIGITS = 10

ANCHOR_ID_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*$")

_rng = random.SystemRandom()


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits))


def generate_anchor_id() -> str:
    """Return a new anchor id, e.g. ``id-4821937710k3j9x0q2mf7a``."""
    time_part = str(time.time_ns())[-_TIME_DIGITS:]
    random_part = _base36(_rng.getrandbits(_RANDOM_BITS))
    return f"{ANCHOR_PREFIX}{time_part}{random_part}"


def is_valid_anchor_id(value: str) -> bool:
    """True if *value* can be used as an element id and ``#`` fragment."""
    return bool(value) and bool(ANCHOR_ID_PATTERN.match(value))
