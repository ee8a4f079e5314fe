"""Detection and resolution of plus codes (Open Location Codes) in addresses."""

import re
from typing import TYPE_CHECKING, Any, Optional

from loguru import logger
from openlocationcode import openlocationcode as olc

from address_resolver.errors import (
    GeocodingError,
    PlusCodeDecodeError,
    PlusCodeError,
    PlusCodeInvalid,
)
from address_resolver.models import PLUS_CODE_SOURCE, GeocodeResult

if TYPE_CHECKING:
    from address_resolver.race import ProviderRace

# 4-8 code characters, the '+' separator, then 2-3 more
PLUS_CODE_PATTERN = r"[23456789CFGHJMPQRVWX]{4,8}\+[23456789CFGHJMPQRVWX]{2,3}"

_PLUS_CODE = re.compile(PLUS_CODE_PATTERN, re.IGNORECASE)

LOCALITY_SEPARATORS = ",;-"


def find_plus_code(address: str) -> Optional[str]:
    """Return the first plus-code-shaped token in an address, upper-cased."""
    match = _PLUS_CODE.search(address)
    return match.group(0).upper() if match else None


def locality_text(address: str) -> str:
    """Strip every plus code token and surrounding separators from an address."""
    text = _PLUS_CODE.sub("", address).strip()
    return text.strip(LOCALITY_SEPARATORS).strip()


class PlusCodeResolver:
    """Short-circuits resolution when the address carries a plus code.

    Full codes decode locally. Short codes need a reference point, which is
    obtained by racing the providers once on the remaining locality text
    with variation expansion disabled. The locality has every code token
    removed and is never passed back through this resolver, so the
    sub-resolution is at most one race deep.
    """

    def __init__(self, race: "ProviderRace", codec: Any = None):
        self.race = race
        self.codec = codec or olc

    def attempt(self, address: str) -> Optional[GeocodeResult]:
        """
        Resolve the plus code embedded in an address, if there is one.

        Args:
            address: Raw address text.

        Returns:
            GeocodeResult with source 'plus_code', or None when the address
            has no usable plus code.
        """
        code = find_plus_code(address)
        if code is None:
            return None

        logger.debug("Found plus code {}", code)
        try:
            return self._resolve(code, address)
        except PlusCodeError as e:
            logger.info("{}; falling back to provider geocoding", e.message)
            return None

    def _resolve(self, code: str, address: str) -> GeocodeResult:
        if not self.codec.isValid(code):
            raise PlusCodeInvalid(f"Not a valid Open Location Code: {code}", address=address)
        if self.codec.isFull(code):
            logger.debug("Full plus code {}, decoding", code)
            return self._decode(code)
        if self.codec.isShort(code):
            return self._resolve_short(code, address)
        raise PlusCodeInvalid(f"Plus code {code} is neither full nor short", address=address)

    def _resolve_short(self, code: str, address: str) -> GeocodeResult:
        locality = locality_text(address)
        if not locality:
            raise PlusCodeDecodeError(
                f"Short plus code {code} has no locality to recover from", address=address
            )

        logger.debug("Short plus code {}, resolving locality '{}'", code, locality)
        try:
            reference = self.race.race(locality, skip_variations=True)
        except GeocodingError as e:
            raise PlusCodeDecodeError(
                f"Locality '{locality}' for short plus code {code} not found: {e.message}",
                address=address,
            ) from e

        try:
            full_code = self.codec.recoverNearest(code, reference.lat, reference.lon)
        except ValueError as e:
            raise PlusCodeDecodeError(f"Could not recover {code}: {e}", address=address) from e

        logger.debug("Recovered full code {} near {}", full_code, reference.source)
        return self._decode(full_code, provider_source=reference.source)

    def _decode(self, code: str, **kwargs: Any) -> GeocodeResult:
        try:
            area = self.codec.decode(code)
        except ValueError as e:
            raise PlusCodeDecodeError(f"Could not decode {code}: {e}") from e
        return GeocodeResult(
            lat=area.latitudeCenter,
            lon=area.longitudeCenter,
            source=PLUS_CODE_SOURCE,
            **kwargs,
        )
