# neural_playground_library/__init__.py

# This file makes the directory a Python package.
# Key classes and functions are exposed here for easier import.

from .config import (
    GRID_WIDTH, GRID_HEIGHT, POPULATION_SIZE, GENOME_LENGTH,
    TICKS_PER_GENERATION, NUMBER_OF_GENERATIONS
)
from .genome import (decode_src, decode_sink, decode_weight, encode_gene,
                     mutate, crossover, random_gene, random_genome)
from .neurons import SensorKind, ActionKind, DIRECTIONS
from .agents import NeuralAgent
from .world import WorldState, oscillator_value
from .selection_areas import SELECTION_POLICIES
from .evolution import breed_survivors
from .model import SelectionWorld, CollaboratorError

__version__ = "0.1.0"
