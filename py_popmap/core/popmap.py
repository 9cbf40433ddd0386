"""
Generation pass and editable map session.

PopMapGenerator runs one pass: coordinate mapping, tile placement and the
render transform. PopMap holds a location set and reruns a full pass on
every edit; nothing carries over between passes.
"""

from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import structlog

from .coordinate_mapper import CoordinateMapper
from .models import GridLocation, Location, LocationTiles, PopMapOptions
from .render_grid import BACKGROUND, build_render_grid, tiles_to_owner_grid
from .tile_placer import TilePlacer

logger = structlog.get_logger()


class PopMapGenerator:
    """Generates location tile sets from a location list and grid size."""

    def __init__(
        self,
        locations: Sequence[Location],
        grid_width: int,
        grid_height: int,
        options: Optional[PopMapOptions] = None,
    ) -> None:
        self.grid_width = grid_width
        self.grid_height = grid_height
        self.options = options or PopMapOptions()
        self.total_population = sum(location.population for location in locations)

        mapper = CoordinateMapper(grid_width, grid_height, self.options)
        self.grid_locations: List[GridLocation] = mapper.map_locations(locations)
        self.location_tiles: List[LocationTiles] = []

    def generate(self) -> List[LocationTiles]:
        """Place tiles for every location."""
        placer = TilePlacer(
            self.grid_locations, self.grid_width, self.grid_height, self.options
        )
        self.location_tiles = placer.place()
        return self.location_tiles

    def render_grid(self) -> np.ndarray:
        """Render grid for the last generated result."""
        return build_render_grid(self.location_tiles, self.grid_width, self.grid_height)


class PopMap:
    """
    Editable population map.

    Every edit regenerates the whole map. Edits are all-or-nothing: when
    regeneration fails the location set and the previous results are left
    untouched and the error propagates.
    """

    def __init__(
        self,
        locations: Optional[Sequence[Location]] = None,
        grid_width: Optional[int] = None,
        grid_height: Optional[int] = None,
        options: Optional[PopMapOptions] = None,
    ) -> None:
        if grid_width is None or grid_height is None or options is None:
            from ..config import settings

            if grid_width is None:
                grid_width = settings.default_grid_width
            if grid_height is None:
                grid_height = settings.default_grid_height
            if options is None:
                options = PopMapOptions.from_settings(settings)

        self.options = options
        self.locations: List[Location] = []
        self.grid_locations: List[GridLocation] = []
        self.tiles: List[LocationTiles] = []

        self._apply(list(locations or []), grid_width, grid_height)

    def regenerate(self) -> List[LocationTiles]:
        """Discard all results and run a fresh generation pass."""
        self._apply(self.locations, self.grid_width, self.grid_height)
        return self.tiles

    def add_location(self, location: Location) -> None:
        if self._find(location.name) is not None:
            raise ValueError(f"Location '{location.name}' already exists")
        self._apply(self.locations + [location], self.grid_width, self.grid_height)

    def remove_location(self, name: str) -> None:
        position = self._require(name)
        remaining = self.locations[:position] + self.locations[position + 1:]
        self._apply(remaining, self.grid_width, self.grid_height)

    def update_location(self, name: str, **changes: Any) -> None:
        """
        Apply field changes to one location.

        Args:
            name: Current location name
            **changes: Any of name, population, lat, lng

        Raises:
            KeyError: If no location is called `name`
            ValueError: On unknown fields or a rename onto an existing name
        """
        position = self._require(name)
        unknown = sorted(set(changes) - set(Location.model_fields))
        if unknown:
            raise ValueError(f"Unknown location fields: {', '.join(unknown)}")

        new_name = changes.get("name", name)
        if new_name != name and self._find(new_name) is not None:
            raise ValueError(f"Location '{new_name}' already exists")

        current = self.locations[position]
        updated = Location.model_validate({**current.model_dump(), **changes})
        locations = list(self.locations)
        locations[position] = updated
        self._apply(locations, self.grid_width, self.grid_height)

    def resize(self, grid_width: int, grid_height: int) -> None:
        self._apply(self.locations, grid_width, grid_height)

    def location_at(self, x: int, y: int) -> Optional[LocationTiles]:
        """Location owning grid cell (x, y), or None for background or off-grid cells."""
        if not (0 <= x < self.grid_width and 0 <= y < self.grid_height):
            return None
        owner = int(self.owner_grid[y, x])
        if owner == BACKGROUND:
            return None
        return self.tiles[owner]

    def summary(self) -> Dict[str, Any]:
        """Quota versus placed tiles for every location, plus totals."""
        rows = [
            {
                "index": tiles.index,
                "name": tiles.name,
                "population": grid_location.population,
                "quota": grid_location.tile_quota,
                "placed": len(tiles),
                "color": tiles.color,
            }
            for grid_location, tiles in zip(self.grid_locations, self.tiles)
        ]
        return {
            "grid_width": self.grid_width,
            "grid_height": self.grid_height,
            "total_population": sum(location.population for location in self.locations),
            "total_quota": sum(row["quota"] for row in rows),
            "total_placed": sum(row["placed"] for row in rows),
            "locations": rows,
        }

    def _apply(self, locations: List[Location], grid_width: int, grid_height: int) -> None:
        """Regenerate from scratch and commit only if the pass succeeds."""
        if locations:
            generator = PopMapGenerator(locations, grid_width, grid_height, self.options)
            tiles = generator.generate()
            grid_locations = generator.grid_locations
        else:
            if grid_width < 1 or grid_height < 1:
                raise ValueError(
                    f"Grid dimensions must be positive, got {grid_width}x{grid_height}"
                )
            tiles, grid_locations = [], []

        self.locations = locations
        self.grid_width = grid_width
        self.grid_height = grid_height
        self.grid_locations = grid_locations
        self.tiles = tiles
        self.owner_grid = tiles_to_owner_grid(tiles, grid_width, grid_height)
        self.render_grid = build_render_grid(tiles, grid_width, grid_height)

        logger.info(
            "Map regenerated",
            locations=len(locations),
            placed=sum(len(t) for t in tiles),
        )

    def _find(self, name: str) -> Optional[int]:
        for position, location in enumerate(self.locations):
            if location.name == name:
                return position
        return None

    def _require(self, name: str) -> int:
        position = self._find(name)
        if position is None:
            raise KeyError(name)
        return position
