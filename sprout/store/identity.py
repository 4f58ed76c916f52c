# -*- coding: utf-8 -*-
"""Store — document identifiers.

Identifiers are the current time in milliseconds (base 36) followed by nine
random base-36 characters. Uniqueness is probabilistic; no cross-process
coordination is attempted.
"""

from __future__ import annotations

import secrets
import time

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
_RANDOM_LEN = 9


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    out: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        out.append(_ALPHABET[rem])
    return "".join(reversed(out))


def new_id() -> str:
    millis = time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(_RANDOM_LEN))
    return _base36(millis) + suffix
