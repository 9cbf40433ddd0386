"""
Data structures shared by the tile allocation pipeline.

Location records come in from the caller, GridLocation records are derived
once per generation pass, and LocationTiles records are handed back to the
rendering side as the source of truth for which cells belong to which
location.
"""

from dataclasses import dataclass
from typing import List, NamedTuple, Tuple

from pydantic import BaseModel, ConfigDict, Field

# Tile budget shared by all locations of one map
TOTAL_TILES = 1024

# Margin kept free of location centres on every edge of the grid
BUFFER_SIZE = 5

# Candidates collected by the fallback spiral before picking the nearest
MAX_FALLBACK_CANDIDATES = 50

COLOR_PALETTE = [
    "#ff6b6b",  # light red
    "#4ecdc4",  # teal
    "#45b7d1",  # sky blue
    "#96ceb4",  # sage green
    "#feca57",  # golden yellow
    "#ff9ff3",  # pink
    "#54a0ff",  # royal blue
    "#48dbfb",  # cyan
    "#a29bfe",  # lavender
    "#c8d6e5",  # light gray blue
]


class InvalidLocationsError(ValueError):
    """Raised when a location set cannot be normalized onto the grid."""


class Coordinate(NamedTuple):
    """Grid cell address."""
    x: int
    y: int


class Location(BaseModel):
    """Named point with a population count."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, description="Location name")
    population: int = Field(ge=0, description="Population count")
    lat: float = Field(allow_inf_nan=False, description="Latitude")
    lng: float = Field(allow_inf_nan=False, description="Longitude")


class GridLocation(Location):
    """Location projected onto the grid, with its share of the tile budget."""

    center_x: int = Field(description="Grid column of the location centre")
    center_y: int = Field(description="Grid row of the location centre")
    tile_quota: int = Field(ge=0, description="Target number of tiles")


@dataclass(frozen=True)
class LocationTiles:
    """Cells claimed by one location, in placement order."""
    index: int
    name: str
    tiles: Tuple[Coordinate, ...]
    color: str

    def __len__(self) -> int:
        return len(self.tiles)


class PopMapOptions(BaseModel):
    """Tunables for one generation pass."""

    model_config = ConfigDict(frozen=True)

    total_tiles: int = Field(default=TOTAL_TILES, ge=0, description="Tile budget shared by all locations")
    buffer_size: int = Field(default=BUFFER_SIZE, ge=0, description="Margin cells on every grid edge")
    max_fallback_candidates: int = Field(
        default=MAX_FALLBACK_CANDIDATES, ge=1, description="Candidates collected by the fallback spiral"
    )
    palette: List[str] = Field(
        default_factory=lambda: list(COLOR_PALETTE), min_length=1, description="Display colours"
    )

    @classmethod
    def from_settings(cls, settings=None) -> "PopMapOptions":
        """Build options from the application settings."""
        if settings is None:
            from ..config import settings as app_settings
            settings = app_settings
        return cls(
            total_tiles=settings.total_tiles,
            buffer_size=settings.buffer_size,
            max_fallback_candidates=settings.max_fallback_candidates,
        )

    def color_for(self, index: int) -> str:
        """Palette colour for a location index, cycling through the palette."""
        return self.palette[index % len(self.palette)]
