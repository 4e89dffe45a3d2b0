# neural_playground_library/neurons.py
"""
Neurons, sensor kinds and action kinds of an agent's network.

Each agent owns an arena (a flat list) of Neuron objects: sensors first, then
inner neurons, then action neurons. A neuron stores its inputs as
(source_index, weight) pairs pointing into the same arena.

Sensor functions take (agent, world) and return a float, mostly in [0, 1].
Action functions take (agent, world, sign) and commit one discrete effect.
"""
import enum
import math

# Compass directions in their fixed cyclic order. y grows downward, so North is (0, -1).
DIRECTIONS = (
    (1, 0),    # E
    (1, -1),   # NE
    (0, -1),   # N
    (-1, -1),  # NW
    (-1, 0),   # W
    (-1, 1),   # SW
    (0, 1),    # S
    (1, 1),    # SE
)
DIRECTION_NAMES = ("E", "NE", "N", "NW", "W", "SW", "S", "SE")

SENSOR_LAYER = "sensor"
INNER_LAYER = "inner"
ACTION_LAYER = "action"
INNER_NAME = "N"


class SensorKind(enum.Enum):
    AGE = "Age"
    RANDOM = "Rnd"
    POPULATION_DENSITY = "Pop"
    NEAREST_DISTANCE = "NearDist"
    NEAREST_DIRECTION = "NearDir"
    FORWARD_DISTANCE = "FwdDist"
    OSCILLATOR = "Osc"
    FORWARD_REGION_COUNT = "FwdArea"
    LOCAL_REGION_DENSITY = "AreaDens"
    FORWARD_REGION_DISTANCE = "FwdAreaDist"


class ActionKind(enum.Enum):
    RESPONSIVENESS = "Resp"
    MOVE = "Move"
    TURN = "Turn"


class Neuron:
    """A single unit of an agent's network."""
    __slots__ = ("name", "layer", "kind", "potential", "inputs")

    def __init__(self, name, layer, kind=None):
        self.name = name
        self.layer = layer
        self.kind = kind # SensorKind, ActionKind or None for inner neurons
        self.potential = 0.0
        self.inputs = [] # (source_index, weight) pairs

    def reset(self):
        """Drops all input links; the neuron is about to be rewired."""
        self.inputs.clear()
        self.potential = 0.0

    def add_input(self, source_index, weight):
        self.inputs.append((source_index, weight))

    def weighted_sum(self, arena):
        return sum(weight * arena[source].potential for source, weight in self.inputs)

    def __repr__(self):
        return f"Neuron({self.name}, {self.layer}, inputs={len(self.inputs)}, potential={self.potential:.3f})"


def sign(value):
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


# --- Search helpers ---

def _ray(agent, direction):
    """Yields (distance, x, y) along a direction for distance 1..max_dist."""
    dx, dy = DIRECTIONS[direction]
    x, y = agent.pos
    for dist in range(1, agent.max_dist + 1):
        yield dist, x + dx * dist, y + dy * dist


def find_nearest_occupied(agent, world):
    """
    Expanding search around the agent along the 8 compass directions.

    Returns:
        tuple: (distance, direction_index) of the first occupied cell found,
        or (None, None) if nothing is within max_dist.
    """
    x, y = agent.pos
    for dist in range(1, agent.max_dist + 1):
        for direction, (dx, dy) in enumerate(DIRECTIONS):
            if world.is_occupied(x + dx * dist, y + dy * dist):
                return dist, direction
    return None, None


# --- Sensor functions ---

def sense_age(agent, world):
    return min(1.0, agent.age / float(world.max_age))


def sense_random(agent, world):
    return agent.random.random()


def sense_population_density(agent, world):
    x, y = agent.pos
    occupied = sum(1 for dx, dy in DIRECTIONS if world.is_occupied(x + dx, y + dy))
    return occupied / float(len(DIRECTIONS))


def sense_nearest_distance(agent, world):
    dist, _ = find_nearest_occupied(agent, world)
    if dist is None:
        return 1.0
    return dist / float(agent.max_dist)


def sense_nearest_direction(agent, world):
    _, direction = find_nearest_occupied(agent, world)
    if direction is None:
        return 0.0
    return direction / float(len(DIRECTIONS) - 1)


def sense_forward_distance(agent, world):
    for dist, x, y in _ray(agent, agent.facing):
        if world.is_occupied(x, y):
            return dist / float(agent.max_dist)
    return 1.0


def sense_oscillator(agent, world):
    return world.osc_value


def sense_forward_region_count(agent, world):
    count = sum(1 for _, x, y in _ray(agent, agent.facing) if world.in_selection_area(x, y))
    return count / float(agent.max_dist)


def sense_local_region_density(agent, world):
    x, y = agent.pos
    count = 0
    for nx in range(x - 1, x + 2):
        for ny in range(y - 1, y + 2):
            if world.in_selection_area(nx, ny):
                count += 1
    return count / 9.0


def sense_forward_region_distance(agent, world):
    for dist, x, y in _ray(agent, agent.facing):
        if world.in_selection_area(x, y):
            return dist / float(agent.max_dist)
    return 1.0


SENSOR_FUNCTIONS = {
    SensorKind.AGE: sense_age,
    SensorKind.RANDOM: sense_random,
    SensorKind.POPULATION_DENSITY: sense_population_density,
    SensorKind.NEAREST_DISTANCE: sense_nearest_distance,
    SensorKind.NEAREST_DIRECTION: sense_nearest_direction,
    SensorKind.FORWARD_DISTANCE: sense_forward_distance,
    SensorKind.OSCILLATOR: sense_oscillator,
    SensorKind.FORWARD_REGION_COUNT: sense_forward_region_count,
    SensorKind.LOCAL_REGION_DENSITY: sense_local_region_density,
    SensorKind.FORWARD_REGION_DISTANCE: sense_forward_region_distance,
}


# --- Action functions ---

def act_responsiveness(agent, world, direction_sign):
    agent.adjust_responsiveness(direction_sign)


def act_move(agent, world, direction_sign):
    agent.move_forward(world, direction_sign)


def act_turn(agent, world, direction_sign):
    agent.turn(direction_sign)


ACTION_FUNCTIONS = {
    ActionKind.RESPONSIVENESS: act_responsiveness,
    ActionKind.MOVE: act_move,
    ActionKind.TURN: act_turn,
}

SENSOR_KINDS = tuple(SensorKind)
ACTION_KINDS = tuple(ActionKind)


def activation(weighted_sum, responsiveness):
    """Activation shared by inner and action neurons."""
    return responsiveness * math.tanh(weighted_sum)
