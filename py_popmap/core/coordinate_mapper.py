"""
Coordinate normalization from latitude/longitude into grid space.

This is a plain linear min-max normalization, not a geographic projection:
longitude maps onto grid columns and latitude onto grid rows, each stretched
over the grid minus a margin of buffer cells on both edges. Each location
also receives its share of the tile budget, proportional to population.
"""

from typing import List, Optional, Sequence

import numpy as np
import structlog

from .models import GridLocation, InvalidLocationsError, Location, PopMapOptions

logger = structlog.get_logger()


def round_half_away(values):
    """Round to the nearest integer, halves away from zero."""
    values = np.asarray(values, dtype=np.float64)
    return np.sign(values) * np.floor(np.abs(values) + 0.5)


class CoordinateMapper:
    """Turns raw locations into quota-sorted GridLocation records."""

    def __init__(
        self,
        grid_width: int,
        grid_height: int,
        options: Optional[PopMapOptions] = None,
    ) -> None:
        if grid_width < 1 or grid_height < 1:
            raise ValueError(
                f"Grid dimensions must be positive, got {grid_width}x{grid_height}"
            )
        self.grid_width = grid_width
        self.grid_height = grid_height
        self.options = options or PopMapOptions()

    def map_locations(self, locations: Sequence[Location]) -> List[GridLocation]:
        """
        Normalize locations onto the grid and compute their tile quotas.

        Args:
            locations: Input locations, in caller order

        Returns:
            GridLocation records sorted ascending by tile quota, ties kept
            in input order

        Raises:
            InvalidLocationsError: If the list is empty or the total
                population is zero
        """
        if not locations:
            raise InvalidLocationsError("Cannot map an empty location list")

        total_population = sum(location.population for location in locations)
        if total_population == 0:
            raise InvalidLocationsError("Total population of all locations is zero")

        lngs = np.array([location.lng for location in locations], dtype=np.float64)
        lats = np.array([location.lat for location in locations], dtype=np.float64)
        populations = np.array(
            [location.population for location in locations], dtype=np.float64
        )

        centers_x = self._normalize_axis(lngs, self.grid_width, "longitude")
        centers_y = self._normalize_axis(lats, self.grid_height, "latitude")
        quotas = round_half_away(
            self.options.total_tiles * (populations / total_population)
        ).astype(np.int64)

        # Smaller locations are placed first, larger ones grow around them
        order = np.argsort(quotas, kind="stable")

        grid_locations = [
            GridLocation(
                **locations[i].model_dump(include=set(Location.model_fields)),
                center_x=int(centers_x[i]),
                center_y=int(centers_y[i]),
                tile_quota=int(quotas[i]),
            )
            for i in order
        ]

        logger.info(
            "Locations mapped to grid",
            locations=len(grid_locations),
            total_population=total_population,
            total_quota=int(quotas.sum()),
            grid=f"{self.grid_width}x{self.grid_height}",
        )
        return grid_locations

    def _normalize_axis(self, values: np.ndarray, size: int, axis: str) -> np.ndarray:
        """Map raw coordinate values onto [buffer, size - buffer]."""
        buffer = self.options.buffer_size
        if 2 * buffer > size:
            buffer = (size - 1) // 2
        span = size - 2 * buffer

        value_range = values.max() - values.min()
        if value_range == 0:
            # Nothing to stretch, every location sits on the grid midline
            logger.warning("Degenerate coordinate range", axis=axis, value=float(values[0]))
            centers = np.full(len(values), size // 2, dtype=np.float64)
        else:
            centers = round_half_away(
                (values - values.min()) / value_range * span + buffer
            )

        return np.clip(centers, 0, size - 1).astype(np.int64)
