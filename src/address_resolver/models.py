"""Value types produced by the resolution pipeline."""

import math
from dataclasses import asdict, dataclass
from typing import Any, Optional

PLUS_CODE_SOURCE = "plus_code"
APPROXIMATE_SOURCE = "approximate"


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 latitude/longitude pair."""

    lat: float
    lon: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.lat) and math.isfinite(self.lon)):
            raise ValueError(f"Coordinate must be finite, got ({self.lat}, {self.lon})")
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"Latitude out of range: {self.lat}")
        if not -180.0 <= self.lon <= 180.0:
            raise ValueError(f"Longitude out of range: {self.lon}")


@dataclass
class GeocodeResult:
    """Normalized result returned for every successful resolution."""

    lat: float
    lon: float
    source: str  # 'plus_code', a provider name, or 'approximate'
    provider_source: Optional[str] = None  # Provider that resolved a short code's locality
    matched_address: Optional[str] = None
    variation_used: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.source:
            raise ValueError("GeocodeResult requires a non-empty source")

    @classmethod
    def from_coordinate(cls, coordinate: Coordinate, source: str, **kwargs: Any) -> "GeocodeResult":
        return cls(lat=coordinate.lat, lon=coordinate.lon, source=source, **kwargs)

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.lat, self.lon)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary for JSON serialization, omitting unset fields."""
        return {key: value for key, value in asdict(self).items() if value is not None}
