"""Occupancy map used when agent collisions are enabled."""

import numpy as np
from typing import Optional, Tuple


class OccupancyMap:
    """
    Tracks which cell each agent currently holds.

    Coordinate convention: (x, y) for API, [y, x] for array indexing.
    Occupancy: 0 = empty, otherwise agent_id + 1 of the single occupant.
    """

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.occupancy = np.zeros((height, width), dtype=np.int32)

    def _in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def occupant(self, x: int, y: int) -> Optional[int]:
        """Return the id of the agent holding the cell, or None."""
        if not self._in_bounds(x, y):
            return None
        value = int(self.occupancy[y, x])
        return value - 1 if value else None

    def is_blocked_for(self, agent_id: int, x: int, y: int) -> bool:
        """True when the cell is held by an agent other than agent_id."""
        holder = self.occupant(x, y)
        return holder is not None and holder != agent_id

    def place_agent(self, agent_id: int, x: int, y: int) -> None:
        """Place agent at position."""
        if self._in_bounds(x, y):
            self.occupancy[y, x] = agent_id + 1

    def remove_agent(self, x: int, y: int) -> None:
        """Remove agent from position."""
        if self._in_bounds(x, y):
            self.occupancy[y, x] = 0

    def move_agent(self, agent_id: int,
                   from_pos: Tuple[int, int],
                   to_pos: Tuple[int, int]) -> None:
        """Atomically move agent from one cell to another."""
        self.remove_agent(*from_pos)
        self.place_agent(agent_id, *to_pos)

    def count(self) -> int:
        return int(np.count_nonzero(self.occupancy))

    def reset(self) -> None:
        self.occupancy.fill(0)
