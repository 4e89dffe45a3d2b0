# neural_playground_library/agents.py
from mesa import Agent

from .config import INITIAL_RESPONSIVENESS, RESPONSIVENESS_STEP
from .genome import crossover, decode_sink, decode_src, decode_weight, mutate
from .neurons import (ACTION_FUNCTIONS, ACTION_KINDS, ACTION_LAYER, DIRECTIONS,
                      INNER_LAYER, INNER_NAME, SENSOR_FUNCTIONS, SENSOR_KINDS,
                      SENSOR_LAYER, Neuron, activation, sign)


class NeuralAgent(Agent):
    """
    A grid dwelling agent driven by a small neural network decoded from its genome.

    The agent owns a flat arena of neurons (sensors, then inner neurons, then
    actions). The arena is allocated once; every generation the agent is reset
    in place with a new genome and its neurons are rewired.
    """
    def __init__(self, model, pos, inner_count, max_dist, genome, sensor_count=None):
        """
        Initializes a NeuralAgent.

        Args:
            model: The Mesa model instance this agent belongs to. Its random
                generator drives every stochastic decision of the agent.
            pos (tuple): Initial (x, y) grid position.
            inner_count (int): Number of inner (hidden) neurons, at least 1.
            max_dist (int): How far the distance sensors look.
            genome (list[int]): Genes describing the network connections.
            sensor_count (int, optional): Size of the sensor layer. Defaults to the
                number of sensor kinds; larger layers repeat the kinds cyclically.
        """
        super().__init__(model)
        if inner_count < 1:
            raise ValueError("An agent needs at least one inner neuron.")
        if sensor_count is not None and sensor_count < 1:
            raise ValueError("An agent needs at least one sensor neuron.")
        if sensor_count is None:
            sensor_count = len(SENSOR_KINDS)

        self.pos = pos
        self.max_dist = max_dist
        self.genome = list(genome)
        self.is_alive = True
        self.age = 0
        self.responsiveness = INITIAL_RESPONSIVENESS
        self.facing = self.random.randrange(len(DIRECTIONS))

        # Each agent has a full set of neurons that are not necessarily wired together
        self.neurons = []
        for i in range(sensor_count):
            kind = SENSOR_KINDS[i % len(SENSOR_KINDS)]
            cycle = i // len(SENSOR_KINDS)
            name = kind.value if cycle == 0 else f"{kind.value}{cycle}"
            self.neurons.append(Neuron(name, SENSOR_LAYER, kind))
        for i in range(inner_count):
            self.neurons.append(Neuron(f"{INNER_NAME}{i}", INNER_LAYER))
        for kind in ACTION_KINDS:
            self.neurons.append(Neuron(kind.value, ACTION_LAYER, kind))

        self.inner_offset = sensor_count
        self.action_offset = sensor_count + inner_count
        self.sensor_layer = self.neurons[:self.inner_offset]
        self.inner_layer = self.neurons[self.inner_offset:self.action_offset]
        self.action_layer = self.neurons[self.action_offset:]

        self.wire_neurons()

    def reset(self, genome, pos):
        """Reuses this agent for the next generation with a new genome and position."""
        self.pos = pos
        self.is_alive = True
        self.age = 0
        self.responsiveness = INITIAL_RESPONSIVENESS
        self.facing = self.random.randrange(len(DIRECTIONS))
        self.genome = list(genome)
        for neuron in self.sensor_layer:
            neuron.potential = 0.0
        self.wire_neurons()

    def _source_index(self, gene):
        is_inner, neuron_id = decode_src(gene)
        if is_inner:
            return self.inner_offset + neuron_id % len(self.inner_layer)
        return neuron_id % len(self.sensor_layer)

    def _sink_index(self, gene):
        is_inner, neuron_id = decode_sink(gene)
        if is_inner:
            return self.inner_offset + neuron_id % len(self.inner_layer)
        return self.action_offset + neuron_id % len(self.action_layer)

    def wire_neurons(self):
        """
        Connects the neurons as described by the genome.

        Old links are dropped first since neurons are reused across generations.
        A gene whose source and sink resolve to the same inner neuron produces no link.
        """
        for neuron in self.inner_layer + self.action_layer:
            neuron.reset()

        for gene in self.genome:
            source = self._source_index(gene)
            sink = self._sink_index(gene)
            if source == sink:
                continue
            self.neurons[sink].add_input(source, decode_weight(gene))

    def activate(self, world):
        """
        Evaluates the network for one tick: sensors, then inner neurons, then actions.

        Inner sums are all taken before any inner potential is updated, so an
        inner to inner link always carries the previous tick's value.
        """
        for neuron in self.sensor_layer:
            neuron.potential = self.responsiveness * SENSOR_FUNCTIONS[neuron.kind](self, world)

        inner_sums = [neuron.weighted_sum(self.neurons) for neuron in self.inner_layer]
        for neuron, total in zip(self.inner_layer, inner_sums):
            neuron.potential = activation(total, self.responsiveness)

        for neuron in self.action_layer:
            neuron.potential = activation(neuron.weighted_sum(self.neurons), self.responsiveness)
            # Commit the action with probability |p|, in the direction of sign(p)
            if self.random.random() < abs(neuron.potential):
                ACTION_FUNCTIONS[neuron.kind](self, world, sign(neuron.potential))

    def simulation_step(self, world):
        self.age += 1
        self.activate(world)

    # --- Actions ---

    def adjust_responsiveness(self, direction_sign):
        self.responsiveness += RESPONSIVENESS_STEP * direction_sign

    def move_forward(self, world, direction_sign):
        """
        Moves one cell along the facing direction (backwards for a negative sign).

        The destination is clamped to the grid. Returns True if the agent moved;
        a clamped no-op or an occupied destination leaves everything unchanged.
        """
        dx, dy = DIRECTIONS[self.facing]
        target = world.clamp(self.pos[0] + dx * direction_sign, self.pos[1] + dy * direction_sign)
        if world.move_occupant(self.pos, target):
            self.pos = target
            return True
        return False

    def turn(self, direction_sign):
        self.facing = (self.facing + direction_sign) % len(DIRECTIONS)

    # --- Breeding ---

    def breed(self, partner, mutation_rate):
        """
        Produces one child genome from this agent and a partner.

        Args:
            partner (NeuralAgent): The other parent.
            mutation_rate (float): Per-gene probability of mutation.

        Returns:
            list[int]: The child's genome.
        """
        genome = crossover(self.genome, partner.genome, self.random)
        for i, gene in enumerate(genome):
            if self.random.random() < mutation_rate:
                genome[i] = mutate(gene, self.random)
        return genome

    # --- Introspection ---

    def network_edges(self):
        """
        Lists the wired connections as (source_name, sink_name, weight) tuples.
        """
        edges = []
        for neuron in self.inner_layer + self.action_layer:
            for source, weight in neuron.inputs:
                edges.append((self.neurons[source].name, neuron.name, weight))
        return edges

    def describe_network(self):
        lines = [f"{src} -> {sink} ({weight:.1f})" for src, sink, weight in self.network_edges()]
        return "\n".join(lines) if lines else "(no connections)"

    def __repr__(self):
        return (f"NeuralAgent(id:{self.unique_id}, pos:{self.pos}, alive:{self.is_alive}, "
                f"age:{self.age}, resp:{self.responsiveness:.2f})")
