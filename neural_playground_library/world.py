# neural_playground_library/world.py
import math
import numpy as np


def oscillator_value(tick, period):
    """Global periodic signal: 0.5 + 0.5 * cos(2*pi * (tick mod period) / period)."""
    return 0.5 + 0.5 * math.cos(2.0 * math.pi * (tick % period) / period)


class WorldState:
    """
    Shared state every agent reads (and moves within) during a tick.

    The occupancy grid holds exactly one True cell per agent position and the
    selection area marks the cells an agent must end a generation on to survive.
    Both grids are numpy boolean arrays indexed as [x, y].
    """
    def __init__(self, width, height, osc_period, max_age):
        """
        Args:
            width (int): Grid width in cells.
            height (int): Grid height in cells.
            osc_period (int): Period of the global oscillator in ticks.
            max_age (int): Age used to normalise the age sensor (ticks per generation).
        """
        self.width = width
        self.height = height
        self.osc_period = osc_period
        self.max_age = max_age
        self.osc_value = oscillator_value(0, osc_period)
        self.tick = 0
        self.occupancy = np.zeros((width, height), dtype=bool)
        self.selection_area = np.zeros((width, height), dtype=bool)

    def in_bounds(self, x, y):
        return 0 <= x < self.width and 0 <= y < self.height

    def clamp(self, x, y):
        return (max(0, min(x, self.width - 1)),
                max(0, min(y, self.height - 1)))

    def is_occupied(self, x, y):
        """Out of bounds cells are reported as empty."""
        return self.in_bounds(x, y) and bool(self.occupancy[x, y])

    def occupy(self, pos):
        self.occupancy[pos[0], pos[1]] = True

    def vacate(self, pos):
        self.occupancy[pos[0], pos[1]] = False

    def move_occupant(self, old_pos, new_pos):
        """
        Moves an occupancy mark from old_pos to new_pos.

        Returns:
            bool: True if the move happened. Moving onto the same cell or onto
            an occupied cell leaves the grid untouched.
        """
        if old_pos == new_pos or self.occupancy[new_pos[0], new_pos[1]]:
            return False
        self.occupancy[old_pos[0], old_pos[1]] = False
        self.occupancy[new_pos[0], new_pos[1]] = True
        return True

    def clear_occupancy(self):
        self.occupancy[:, :] = False

    def occupied_count(self):
        return int(self.occupancy.sum())

    def pick_free_cell(self, rng):
        """
        Draws random cells until an unoccupied one is found and marks it occupied.

        Callers guarantee at least one free cell exists.
        """
        while True:
            x = rng.randrange(self.width)
            y = rng.randrange(self.height)
            if not self.occupancy[x, y]:
                self.occupancy[x, y] = True
                return (x, y)

    def in_selection_area(self, x, y):
        return self.in_bounds(x, y) and bool(self.selection_area[x, y])

    def clear_selection_area(self):
        self.selection_area[:, :] = False

    def selection_cell_count(self):
        return int(self.selection_area.sum())

    def selection_coverage(self):
        """Fraction of the grid covered by the selection area."""
        return self.selection_cell_count() / float(self.width * self.height)

    def advance_tick(self):
        """Moves the clock forward one tick and recomputes the oscillator from it."""
        self.tick += 1
        self.osc_value = oscillator_value(self.tick, self.osc_period)
        return self.tick
