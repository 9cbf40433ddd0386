#!/usr/bin/env python3
"""
Simple demo script showing population tile map generation.
"""

import string

from py_popmap.core import BACKGROUND, Location, PopMap
from py_popmap.logging_config import configure_logging

CITIES = [
    Location(name="Tokyo", population=37_400_000, lat=35.68, lng=139.69),
    Location(name="Osaka", population=19_100_000, lat=34.69, lng=135.50),
    Location(name="Nagoya", population=9_500_000, lat=35.18, lng=136.91),
    Location(name="Sapporo", population=2_600_000, lat=43.06, lng=141.35),
    Location(name="Fukuoka", population=2_500_000, lat=33.59, lng=130.40),
    Location(name="Sendai", population=2_300_000, lat=38.27, lng=140.87),
    Location(name="Hiroshima", population=1_400_000, lat=34.39, lng=132.46),
    Location(name="Niigata", population=800_000, lat=37.92, lng=139.04),
]

SYMBOLS = string.ascii_uppercase


def render_ascii(popmap: PopMap) -> str:
    """Draw the render grid with one character per render cell, north at the top."""
    lines = []
    for row in popmap.render_grid[::-1]:
        lines.append("".join("." if value == BACKGROUND else SYMBOLS[value % len(SYMBOLS)] for value in row))
    return "\n".join(lines)


def main():
    """Demonstrate tile map generation and editing."""
    configure_logging(level="WARNING")

    print("Py-PopMap Generation Demo")
    print("=" * 40)

    popmap = PopMap(CITIES, grid_width=32, grid_height=32)
    print(render_ascii(popmap))

    print("\nLocations:")
    print("-" * 30)
    for row in popmap.summary()["locations"]:
        symbol = SYMBOLS[row["index"] % len(SYMBOLS)]
        print(f"  {symbol} {row['name']:<10} quota={row['quota']:4d} placed={row['placed']:4d} {row['color']}")

    print("\nMoving Sapporo south and doubling its population...")
    popmap.update_location("Sapporo", lat=36.0, population=5_200_000)
    print(render_ascii(popmap))

    summary = popmap.summary()
    print(f"\nTotal quota: {summary['total_quota']}, placed: {summary['total_placed']}")


if __name__ == "__main__":
    main()
