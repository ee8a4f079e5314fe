"""Address variation ladder used to retry failed lookups.

Colloquial addresses often carry landmarks ("near the temple", "opp. to
the mall") that providers cannot match. The ladder strips those and then
walks from the full address towards ever more generic forms.
"""

import re

from address_resolver.config import Settings
from address_resolver.plus_code import PLUS_CODE_PATTERN

# A plus code token plus any separators that follow it
_PLUS_CODE_TOKEN = re.compile(PLUS_CODE_PATTERN + r"[,\s]*", re.IGNORECASE)

# Landmark phrases, each running up to (and including) the next comma
FILLER_PATTERNS = [
    re.compile(r"\bopp\.\s*to\b[^,]*,?\s*", re.IGNORECASE),
    re.compile(r"\bnear\b[^,]*,?\s*", re.IGNORECASE),
    re.compile(r"\bopposite\b[^,]*,?\s*", re.IGNORECASE),
]

SEPARATORS = " ,;-"


def clean_address(address: str) -> str:
    """
    Remove plus code tokens and landmark filler from an address.

    Args:
        address: Raw address text.

    Returns:
        Cleaned address with surrounding whitespace and separators trimmed.
    """
    cleaned = _PLUS_CODE_TOKEN.sub("", address)
    for pattern in FILLER_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    return cleaned.strip().strip(SEPARATORS).strip()


def _split_parts(address: str) -> list[str]:
    return [part.strip() for part in address.split(",") if part.strip()]


def _unique(candidates: list[str]) -> list[str]:
    """Drop blank entries and duplicates, keeping first-seen order."""
    return list(dict.fromkeys(c.strip() for c in candidates if c and c.strip()))


class AddressVariationGenerator:
    """Builds the ordered, de-duplicated ladder of address variations."""

    def __init__(
        self,
        local_keywords: list[str],
        local_country: str,
        generic_country_suffixes: list[str],
    ):
        self.local_country = local_country
        self._local_pattern = re.compile(
            "|".join(re.escape(keyword) for keyword in local_keywords), re.IGNORECASE
        )
        self._country_pattern = re.compile(rf"\b{re.escape(local_country)}\b", re.IGNORECASE)
        suffixes = "|".join(re.escape(suffix) for suffix in generic_country_suffixes)
        self._generic_suffix_pattern = re.compile(rf",\s*(?:{suffixes})\s*$", re.IGNORECASE)

    @classmethod
    def from_settings(cls, settings: Settings) -> "AddressVariationGenerator":
        return cls(
            local_keywords=settings.local_keywords,
            local_country=settings.local_country,
            generic_country_suffixes=settings.generic_country_suffixes,
        )

    def is_local(self, address: str) -> bool:
        """Whether the address mentions any local country/region/city keyword."""
        return bool(self._local_pattern.pattern) and bool(self._local_pattern.search(address))

    def variations(self, cleaned: str, is_local: bool) -> list[str]:
        """
        Generate the variation ladder for a cleaned address.

        Args:
            cleaned: Output of :func:`clean_address`.
            is_local: Result of :meth:`is_local` on the original address.

        Returns:
            Unique, non-blank variations from most to least specific.
        """
        parts = _split_parts(cleaned)

        if is_local:
            candidates = [
                cleaned,
                ", ".join(parts[-3:]),
                ", ".join(parts[-2:]),
                ", ".join(parts[-1:]),
            ]
            if cleaned and not self._country_pattern.search(cleaned):
                candidates.append(f"{cleaned}, {self.local_country}")
            return _unique(candidates)

        return _unique([
            cleaned,
            self._generic_suffix_pattern.sub("", cleaned),
            cleaned.split(",", 1)[0],
            ", ".join(parts[:2]),
        ])

    def ladder(self, address: str) -> list[str]:
        """Clean a raw address and build its ladder in one step."""
        return self.variations(clean_address(address), self.is_local(address))
