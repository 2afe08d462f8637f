"""Postal code canonicalization shared by every geocoding provider."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_NON_DIGITS = re.compile(r"[^0-9]")


@dataclass(frozen=True)
class PostcodeFormat:
    """Fixed-width numeric postcode format, e.g. 6 digits for Indian PIN codes."""

    length: int = 6

    def __post_init__(self) -> None:
        if self.length <= 0:
            raise ValueError(f"postcode length must be positive, got {self.length}")

    def matches(self, value: Optional[str]) -> bool:
        if not value:
            return False
        return re.fullmatch(r"[0-9]{%d}" % self.length, value) is not None

    def find_run(self, digits: str) -> Optional[str]:
        match = re.search(r"[0-9]{%d}" % self.length, digits)
        return match.group(0) if match else None


DEFAULT_POSTCODE_FORMAT = PostcodeFormat()


def normalize_postcode(
    raw: Optional[str],
    postcode_format: PostcodeFormat = DEFAULT_POSTCODE_FORMAT,
) -> Optional[str]:
    """Canonicalize a provider postcode string.

    Non-digits are stripped and the first run of ``postcode_format.length``
    digits is returned. When there is no such run the trimmed input is
    returned unchanged, or None if nothing is left.
    """
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    run = postcode_format.find_run(_NON_DIGITS.sub("", text))
    return run if run else text
