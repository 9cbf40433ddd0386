"""
Core tile allocation functionality.
"""

from .models import (
    Coordinate, GridLocation, InvalidLocationsError, Location, LocationTiles,
    PopMapOptions, COLOR_PALETTE, TOTAL_TILES,
)
from .coordinate_mapper import CoordinateMapper
from .occupancy import OccupancyIndex
from .tile_placer import TilePlacer
from .render_grid import BACKGROUND, build_render_grid
from .popmap import PopMap, PopMapGenerator

__all__ = ['Coordinate', 'GridLocation', 'InvalidLocationsError', 'Location', 'LocationTiles',
           'PopMapOptions', 'COLOR_PALETTE', 'TOTAL_TILES',
           'CoordinateMapper', 'OccupancyIndex', 'TilePlacer',
           'BACKGROUND', 'build_render_grid', 'PopMap', 'PopMapGenerator']
