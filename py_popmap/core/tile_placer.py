"""
Greedy tile placement.

Locations are processed in ascending quota order. Each one:
1. Claims a start cell: its centre if free, otherwise the first free cell
   found by a ring-by-ring spiral around the centre.
2. Grows one cell at a time into the free cell of its adjacency frontier
   (8-neighbourhood of everything it owns) closest to its centre.
3. When walled in, falls back to a bounded spiral search around the centre
   and takes the nearest of the first candidates found.
4. Stops early when nothing is free; the shortfall is not an error.

There is no backtracking: a claimed cell stays claimed for the whole pass.
"""

from itertools import islice
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np
import structlog

from .models import Coordinate, GridLocation, LocationTiles, PopMapOptions
from .occupancy import FREE, OccupancyIndex

logger = structlog.get_logger()


def ring_offsets(radius: int) -> Iterator[Tuple[int, int]]:
    """
    Offsets on the perimeter of the (2r+1)x(2r+1) square, in scan order.

    The outer loop runs dx from -r to r and the inner loop dy from -r to r.
    Placement results depend on this exact order.
    """
    if radius == 0:
        yield 0, 0
        return
    for dx in range(-radius, radius + 1):
        if abs(dx) == radius:
            for dy in range(-radius, radius + 1):
                yield dx, dy
        else:
            yield dx, -radius
            yield dx, radius


class TilePlacer:
    """Claims grid cells for every location of one generation pass."""

    def __init__(
        self,
        grid_locations: Sequence[GridLocation],
        grid_width: int,
        grid_height: int,
        options: Optional[PopMapOptions] = None,
    ) -> None:
        """
        Args:
            grid_locations: Locations in placement order (ascending quota)
            grid_width: Grid width in cells
            grid_height: Grid height in cells
            options: Generation tunables
        """
        self.grid_locations = list(grid_locations)
        self.grid_width = grid_width
        self.grid_height = grid_height
        self.options = options or PopMapOptions()
        self.occupancy = OccupancyIndex(grid_width, grid_height)
        self.location_tiles: List[LocationTiles] = []

    def place(self) -> List[LocationTiles]:
        """
        Run a full placement pass from an empty grid.

        Returns:
            One LocationTiles per location, in placement order
        """
        self.occupancy = OccupancyIndex(self.grid_width, self.grid_height)
        self.location_tiles = []

        logger.info(
            "Starting tile placement",
            locations=len(self.grid_locations),
            grid=f"{self.grid_width}x{self.grid_height}",
        )

        for index, location in enumerate(self.grid_locations):
            tiles = self.place_location(index, location)
            self.location_tiles.append(
                LocationTiles(
                    index=index,
                    name=location.name,
                    tiles=tuple(tiles),
                    color=self.options.color_for(index),
                )
            )

        logger.info(
            "Tile placement complete",
            claimed=self.occupancy.claimed_count,
            capacity=self.grid_width * self.grid_height,
        )
        return self.location_tiles

    def place_location(self, index: int, location: GridLocation) -> List[Coordinate]:
        """Claim up to `tile_quota` cells for one location."""
        tiles: List[Coordinate] = []
        center_x, center_y = location.center_x, location.center_y

        if location.tile_quota > 0:
            start = self.find_nearest_open_cell(center_x, center_y)
            if start is not None:
                frontier = np.zeros((self.grid_height, self.grid_width), dtype=bool)
                self._claim(start, index, tiles, frontier)

                while len(tiles) < location.tile_quota:
                    next_cell = self.find_best_next_cell(center_x, center_y, frontier)
                    if next_cell is None:
                        break
                    self._claim(next_cell, index, tiles, frontier)

        if len(tiles) < location.tile_quota:
            logger.warning(
                "Partial allocation",
                location=location.name,
                quota=location.tile_quota,
                placed=len(tiles),
            )
        else:
            logger.info("Location placed", location=location.name, tiles=len(tiles))
        return tiles

    def find_nearest_open_cell(self, target_x: int, target_y: int) -> Optional[Coordinate]:
        """
        Start cell for a location: the target itself when free, otherwise
        the first free cell in spiral scan order (not the nearest by distance).
        """
        max_radius = max(self.grid_width, self.grid_height)
        return next(self._spiral_cells(target_x, target_y, max_radius), None)

    def find_best_next_cell(
        self, center_x: int, center_y: int, frontier: np.ndarray
    ) -> Optional[Coordinate]:
        """
        Pick the next cell to grow into.

        Frontier cells are enumerated in ascending (y, x) order and the first
        one at minimum distance to the centre wins.
        """
        ys, xs = np.nonzero(frontier)
        if len(xs) > 0:
            dist_sq = (xs - center_x) ** 2 + (ys - center_y) ** 2
            best = int(np.argmin(dist_sq))
            return Coordinate(int(xs[best]), int(ys[best]))

        return self._fallback_search(center_x, center_y)

    def _fallback_search(self, center_x: int, center_y: int) -> Optional[Coordinate]:
        """Nearest of the first free cells found spiralling out from the centre."""
        if self.occupancy.is_full:
            return None

        max_radius = max(self.grid_width, self.grid_height)
        candidates = list(
            islice(
                self._spiral_cells(center_x, center_y, max_radius),
                self.options.max_fallback_candidates,
            )
        )
        if not candidates:
            return None

        logger.debug(
            "Frontier exhausted, using spiral fallback",
            center=(center_x, center_y),
            candidates=len(candidates),
        )
        return min(
            candidates,
            key=lambda cell: (cell.x - center_x) ** 2 + (cell.y - center_y) ** 2,
        )

    def _spiral_cells(self, center_x: int, center_y: int, max_radius: int) -> Iterator[Coordinate]:
        """Free grid cells ring by ring around the centre, radius 0 first."""
        occupancy = self.occupancy
        for radius in range(max_radius + 1):
            for dx, dy in ring_offsets(radius):
                x = center_x + dx
                y = center_y + dy
                if occupancy.is_valid(x, y) and not occupancy.is_claimed(x, y):
                    yield Coordinate(x, y)

    def _claim(
        self,
        cell: Coordinate,
        index: int,
        tiles: List[Coordinate],
        frontier: np.ndarray,
    ) -> None:
        """Claim a cell and fold its free neighbours into the frontier."""
        x, y = cell
        self.occupancy.claim(x, y, index)
        tiles.append(cell)

        frontier[y, x] = False
        y0, y1 = max(y - 1, 0), min(y + 2, self.grid_height)
        x0, x1 = max(x - 1, 0), min(x + 2, self.grid_width)
        frontier[y0:y1, x0:x1] |= self.occupancy.as_grid()[y0:y1, x0:x1] == FREE
