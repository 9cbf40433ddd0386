"""Claimed-cell bookkeeping for one generation pass."""

from typing import Tuple

import numpy as np

# Owner value of an unclaimed cell
FREE = -1


class OccupancyIndex:
    """
    Per-cell owner array addressed by packed coordinates.

    Cell (x, y) lives at index y * width + x. Each slot holds the index of
    the owning location or FREE. The index only ever grows during a pass;
    a new pass starts from a fresh instance.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.owners = np.full(width * height, FREE, dtype=np.int32)
        self.claimed_count = 0

    def pack(self, x: int, y: int) -> int:
        return y * self.width + x

    def unpack(self, packed: int) -> Tuple[int, int]:
        return packed % self.width, packed // self.width

    def is_valid(self, x: int, y: int) -> bool:
        """Bounds check only, occupancy is not consulted."""
        return 0 <= x < self.width and 0 <= y < self.height

    def is_claimed(self, x: int, y: int) -> bool:
        return self.owners[self.pack(x, y)] != FREE

    def owner(self, x: int, y: int) -> int:
        """Index of the location owning (x, y), or FREE."""
        return int(self.owners[self.pack(x, y)])

    def claim(self, x: int, y: int, owner: int = 0) -> None:
        """
        Mark (x, y) as taken by `owner`.

        Raises:
            IndexError: If the cell is outside the grid
            ValueError: If the cell is already claimed
        """
        if not self.is_valid(x, y):
            raise IndexError(f"Cell ({x}, {y}) is outside the {self.width}x{self.height} grid")
        packed = self.pack(x, y)
        if self.owners[packed] != FREE:
            raise ValueError(
                f"Cell ({x}, {y}) already claimed by location {self.owners[packed]}"
            )
        self.owners[packed] = owner
        self.claimed_count += 1

    @property
    def is_full(self) -> bool:
        return self.claimed_count >= self.width * self.height

    def as_grid(self) -> np.ndarray:
        """Owner array reshaped to (height, width), indexed [y, x]."""
        return self.owners.reshape(self.height, self.width)

    def free_mask(self) -> np.ndarray:
        """Boolean (height, width) array of unclaimed cells."""
        return self.as_grid() == FREE
