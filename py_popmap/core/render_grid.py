"""
Render grid construction.

The render grid interleaves tile cells with border and corner cells so that
multi-tile regions draw as one shape. Tile (x, y) lands on render cell
(2x+1, 2y+1); the even rows and columns between tiles hold borders and
corners:

    even render position (ex, ey), diagonal tiles
        up-left (ex-1, ey-1)    up-right (ex+1, ey-1)
        down-left (ex-1, ey+1)  down-right (ex+1, ey+1)

    up-left == up-right             -> border (ex, ey-1) filled
    up-left == down-left            -> border (ex-1, ey) filled
    all four equal                  -> corner (ex, ey) filled

Only even positions at least two cells away from the outer edge are
inspected. Everything else stays background, so ragged region edges draw
with plain background borders.
"""

from typing import Iterable

import numpy as np
import structlog

from .models import LocationTiles

logger = structlog.get_logger()

# Render cell value meaning "no location"
BACKGROUND = -1


def tiles_to_owner_grid(
    location_tiles: Iterable[LocationTiles], grid_width: int, grid_height: int
) -> np.ndarray:
    """Per-cell owner index as a (height, width) array, BACKGROUND where unclaimed."""
    owners = np.full((grid_height, grid_width), BACKGROUND, dtype=np.int32)
    for location in location_tiles:
        for x, y in location.tiles:
            owners[y, x] = location.index
    return owners


def build_render_grid(
    location_tiles: Iterable[LocationTiles], grid_width: int, grid_height: int
) -> np.ndarray:
    """
    Build the render grid for a placement result.

    Args:
        location_tiles: Placement result, the source of tile ownership
        grid_width: Placement grid width in cells
        grid_height: Placement grid height in cells

    Returns:
        int32 array of shape (2*grid_height+1, 2*grid_width+1) indexed
        [ry, rx], holding a location index or BACKGROUND
    """
    owners = tiles_to_owner_grid(location_tiles, grid_width, grid_height)

    render = np.full((2 * grid_height + 1, 2 * grid_width + 1), BACKGROUND, dtype=np.int32)
    render[1::2, 1::2] = owners

    # Diagonal tiles around every interior even position, shape (h-1, w-1)
    up_left = owners[:-1, :-1]
    up_right = owners[:-1, 1:]
    down_left = owners[1:, :-1]
    down_right = owners[1:, 1:]

    assigned = up_left != BACKGROUND
    same_row = assigned & (up_left == up_right)
    same_column = assigned & (up_left == down_left)
    same_corner = same_row & same_column & (up_left == down_right)

    # Views onto the border and corner cells, aligned with the arrays above
    row_borders = render[1:2 * grid_height - 2:2, 2:2 * grid_width - 1:2]
    column_borders = render[2:2 * grid_height - 1:2, 1:2 * grid_width - 2:2]
    corners = render[2:2 * grid_height - 1:2, 2:2 * grid_width - 1:2]

    row_borders[same_row] = up_left[same_row]
    column_borders[same_column] = up_left[same_column]
    corners[same_corner] = up_left[same_corner]

    logger.debug(
        "Render grid built",
        shape=render.shape,
        borders=int(same_row.sum() + same_column.sum()),
        corners=int(same_corner.sum()),
    )
    return render
