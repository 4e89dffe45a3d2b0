import random

import pytest

from neural_playground_library import SelectionWorld


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def small_world():
    return SelectionWorld(width=12, height=12, population_size=10, genome_length=8,
                          inner_count=3, osc_period=10, max_dist=5,
                          ticks_per_generation=5, selection_policy="central_square",
                          seed=42)


@pytest.fixture
def lone_agent_world():
    """A world with a single agent, handy for sensor and action checks."""
    return SelectionWorld(width=12, height=12, population_size=1, genome_length=4,
                          inner_count=2, osc_period=10, max_dist=5,
                          ticks_per_generation=5, selection_policy="central_square",
                          seed=7)


def _place(world_model, agent, pos, facing=None):
    world_model.world.vacate(agent.pos)
    agent.pos = pos
    world_model.world.occupy(pos)
    if facing is not None:
        agent.facing = facing
    return agent


@pytest.fixture
def place():
    """Moves an agent to pos, keeping the occupancy grid consistent."""
    return _place
