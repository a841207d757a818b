"""Random alias generation."""

from __future__ import annotations

import random

ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"

_rng = random.SystemRandom()


def new_random_string(length: int) -> str:
    """Return ``length`` random ASCII letters and digits; empty if ``length`` <= 0."""
    if length <= 0:
        return ""
    return "".join(_rng.choices(ALPHABET, k=length))