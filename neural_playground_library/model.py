# neural_playground_library/model.py
import numpy as np
from mesa import Model

from .agents import NeuralAgent
from .config import (GRID_WIDTH, GRID_HEIGHT, POPULATION_SIZE, GENOME_LENGTH,
                     INNER_NEURON_COUNT, OSCILLATOR_PERIOD, MAX_SENSE_DISTANCE,
                     TICKS_PER_GENERATION, MUTATION_RATE, SELECTION_POLICY,
                     REGENERATE_SELECTION_EACH_GENERATION)
from .evolution import breed_survivors
from .genome import random_genome
from .selection_areas import SELECTION_POLICIES
from .world import WorldState

# Generation phases
RUNNING = "running"
SELECTING = "selecting"
REPOPULATING = "repopulating"


class CollaboratorError(Exception):
    """Raised (and reported, never propagated) when a generation observer fails."""
    def __init__(self, observer, original):
        name = getattr(observer, "__name__", repr(observer))
        super().__init__(f"Generation observer {name} failed: {original}")
        self.observer = observer
        self.original = original


class SelectionWorld(Model):
    """
    The Mesa model driving the selection simulation.

    It owns the world state and a fixed population of NeuralAgents and cycles
    through generations: ticks_per_generation ticks of movement, selection of
    the agents standing on the selection area, and repopulation of every slot
    with a child bred from the survivors.
    """
    def __init__(self, width=GRID_WIDTH, height=GRID_HEIGHT,
                 population_size=POPULATION_SIZE, genome_length=GENOME_LENGTH,
                 inner_count=INNER_NEURON_COUNT, osc_period=OSCILLATOR_PERIOD,
                 max_dist=MAX_SENSE_DISTANCE, ticks_per_generation=TICKS_PER_GENERATION,
                 mutation_rate=MUTATION_RATE, selection_policy=SELECTION_POLICY,
                 regenerate_selection=REGENERATE_SELECTION_EACH_GENERATION,
                 sensor_count=None, seed=None):
        """
        Initializes the SelectionWorld.

        Args:
            width (int): Width of the simulation grid.
            height (int): Height of the simulation grid.
            population_size (int): Number of agents, constant for the whole run.
            genome_length (int): Number of genes per genome.
            inner_count (int): Number of inner neurons per agent.
            osc_period (int): Period of the global oscillator in ticks.
            max_dist (int): Maximum sensing distance of the agents.
            ticks_per_generation (int): Ticks between two selections.
            mutation_rate (float): Per-gene mutation probability when breeding.
            selection_policy (str or callable): Name from SELECTION_POLICIES or a
                callable taking (world, rng) that fills world.selection_area.
            regenerate_selection (bool): Redraw the selection area after every selection.
            sensor_count (int, optional): Size of each agent's sensor layer.
            seed (int, optional): Seed for the model's random generator.
        """
        super().__init__(seed=seed)
        if width < 1 or height < 1:
            raise ValueError("Grid dimensions must be positive.")
        if not 0 < population_size <= width * height:
            raise ValueError(
                f"Population size {population_size} must be between 1 and the number of cells ({width * height}).")
        if genome_length < 1:
            raise ValueError("Genome length must be at least 1.")
        if inner_count < 1:
            raise ValueError("At least one inner neuron is required.")
        if sensor_count is not None and sensor_count < 1:
            raise ValueError("At least one sensor neuron is required.")
        if osc_period < 1 or max_dist < 1 or ticks_per_generation < 1:
            raise ValueError("Oscillator period, sensing distance and generation length must be positive.")

        self.population_size = population_size
        self.genome_length = genome_length
        self.inner_count = inner_count
        self.max_dist = max_dist
        self.ticks_per_generation = ticks_per_generation
        self.mutation_rate = mutation_rate
        self.regenerate_selection = regenerate_selection
        if isinstance(selection_policy, str):
            if selection_policy not in SELECTION_POLICIES:
                raise ValueError(f"Unknown selection policy '{selection_policy}'.")
            selection_policy = SELECTION_POLICIES[selection_policy]
        self.selection_policy = selection_policy

        self.world = WorldState(width, height, osc_period, max_age=ticks_per_generation)
        self.generation = 0
        self.phase = RUNNING
        self.last_survivor_count = population_size
        self.generation_observers = []
        self.running = True # Mesa's flag to control model execution

        # Spawn the population; slots are reused for the rest of the run
        self.population = []
        for _ in range(population_size):
            pos = self.world.pick_free_cell(self.random)
            self.population.append(NeuralAgent(
                self, pos, inner_count, max_dist,
                random_genome(genome_length, self.random),
                sensor_count=sensor_count))

        self.regenerate_selection_area()

    @property
    def tick(self):
        return self.world.tick

    def regenerate_selection_area(self):
        self.selection_policy(self.world, self.random)

    def add_generation_observer(self, observer):
        """
        Registers a callable invoked with (model, summary) at every generation end.

        Observers are external collaborators (plotters, exporters, ...). Their
        failures are reported in the summary and never stop the simulation.
        """
        self.generation_observers.append(observer)

    def simulation_step(self):
        """
        Advances the simulation one tick and returns the new tick value.

        Agents are evaluated in population order and moves update the shared
        occupancy grid immediately, so later agents see earlier agents' moves.
        """
        self.phase = RUNNING
        tick = self.world.advance_tick()
        for agent in self.population:
            agent.simulation_step(self.world)
        return tick

    def apply_selection(self):
        """Marks every agent outside the selection area dead and returns the survivor count."""
        self.phase = SELECTING
        survivors = 0
        for agent in self.population:
            if self.world.in_selection_area(*agent.pos):
                if agent.is_alive:
                    survivors += 1
            else:
                agent.is_alive = False
        self.last_survivor_count = survivors
        return survivors

    def breed_survivors(self):
        """Returns one new genome per agent slot, bred from the agents still alive."""
        return breed_survivors(self.population, self.genome_length,
                               self.mutation_rate, self.random)

    def repopulate(self):
        """
        Replaces the population with the next generation.

        Agents are reused: each slot is placed on a fresh free cell and rewired
        with a genome from the new gene pool.
        """
        self.phase = REPOPULATING
        new_genomes = self.breed_survivors()
        self.world.clear_occupancy()
        for agent in self.population:
            pos = self.world.pick_free_cell(self.random)
            agent.reset(new_genomes.pop(), pos)
        self.world.tick = 0
        self.phase = RUNNING

    def get_survivor(self):
        """Returns the first agent still alive, or None."""
        for agent in self.population:
            if agent.is_alive:
                return agent
        return None

    def survivor_count(self):
        return sum(1 for agent in self.population if agent.is_alive)

    def generation_summary(self):
        """
        Collects the statistics exposed at a generation boundary.

        Returns:
            dict: Generation number, survivor count and rate, selection area
            size and coverage, and median age/responsiveness of the population.
        """
        survivors = self.survivor_count()
        return {
            "generation": self.generation,
            "survivors": survivors,
            "population": self.population_size,
            "survival_rate": survivors / float(self.population_size),
            "selection_cells": self.world.selection_cell_count(),
            "selection_coverage": self.world.selection_coverage(),
            "median_age": float(np.median([agent.age for agent in self.population])),
            "median_responsiveness": float(np.median([agent.responsiveness for agent in self.population])),
        }

    def notify_observers(self, summary):
        """Calls every observer; failures are collected as CollaboratorErrors."""
        errors = []
        for observer in self.generation_observers:
            try:
                observer(self, summary)
            except Exception as e:
                error = CollaboratorError(observer, e)
                print(f"Error: {error}")
                errors.append(error)
        return errors

    def end_generation(self):
        """
        Runs selection and repopulation and returns the generation summary.
        """
        self.apply_selection()
        summary = self.generation_summary()
        summary["collaborator_errors"] = self.notify_observers(summary)
        if self.regenerate_selection:
            self.regenerate_selection_area()
        self.repopulate()
        self.generation += 1
        return summary

    def run_generation(self):
        """Runs a full generation of ticks followed by selection and repopulation."""
        while self.world.tick < self.ticks_per_generation:
            self.simulation_step()
        return self.end_generation()

    def step(self):
        """
        Advances the model by one tick, closing the generation when it is complete.
        """
        if not self.running:
            return
        self.simulation_step()
        if self.world.tick >= self.ticks_per_generation:
            self.end_generation()
