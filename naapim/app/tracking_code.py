#!/usr/bin/env python3
"""
Tracking code generation for submitted decision sessions.

A tracking code is the only handle an anonymous user has to come back to a
stored result, so it has to be short, easy to type and unique among issued
codes. Codes are 8 characters from a 32-symbol alphabet without the look-alike
characters 0/O and 1/I.
"""

import secrets
import time
from typing import Callable

from .config import Config
from ..utils.logger import get_logger

logger = get_logger()

ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 8
FALLBACK_FILLER = "X"
BASE36_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def to_base36(value: int) -> str:
    """Upper-case base-36 representation of a non-negative integer."""
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def encode_bytes(raw: bytes) -> str:
    """Map each byte onto the alphabet. 256 is a multiple of 32, so every symbol is equally likely."""
    return "".join(ALPHABET[b % len(ALPHABET)] for b in raw)


class TrackingCodeGenerator:
    """Generates collision-checked tracking codes.

    Args:
        exists: read-only check telling whether a code is already issued
        random_bytes: byte source, ``secrets.token_bytes`` unless a test swaps it
        clock: seconds since the epoch, used by the exhaustion fallback
        max_attempts: number of candidates tried before falling back
        backoff: base delay in seconds after a failed lookup
        sleep: delay function
    """

    def __init__(
        self,
        exists: Callable[[str], bool],
        random_bytes: Callable[[int], bytes] = secrets.token_bytes,
        clock: Callable[[], float] = time.time,
        max_attempts: int = Config.TRACKING_CODE_MAX_ATTEMPTS,
        backoff: float = Config.TRACKING_CODE_LOOKUP_BACKOFF,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.exists = exists
        self.random_bytes = random_bytes
        self.clock = clock
        self.max_attempts = max_attempts
        self.backoff = backoff
        self.sleep = sleep

    def candidate(self) -> str:
        return encode_bytes(self.random_bytes(CODE_LENGTH))

    def fallback(self) -> str:
        """Time-derived code used once the attempt budget is spent. Not checked for uniqueness."""
        millis = int(self.clock() * 1000)
        return to_base36(millis)[-CODE_LENGTH:].rjust(CODE_LENGTH, FALLBACK_FILLER)

    def generate(self) -> str:
        """
        Return a tracking code that is not yet in use.

        Never raises: a failed lookup counts as a spent attempt and is retried
        after a short backoff, and an exhausted budget yields the fallback code.
        """
        for attempt in range(1, self.max_attempts + 1):
            code = self.candidate()
            try:
                taken = self.exists(code)
            except Exception as e:
                logger.warning(f"[TRACKING] Lookup failed on attempt {attempt}/{self.max_attempts}: {e}")
                if attempt < self.max_attempts:
                    self.sleep(self.backoff * attempt)
                continue

            if not taken:
                if attempt > 1:
                    logger.info(f"[TRACKING] Unique code found on attempt {attempt}")
                return code
            logger.debug(f"[TRACKING] Collision on attempt {attempt}")

        code = self.fallback()
        logger.warning(f"[TRACKING] {self.max_attempts} attempts exhausted, using time-based code {code}")
        return code
