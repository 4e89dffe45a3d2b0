# neural_playground_library/evolution.py
from .genome import random_genome


def permutation(n, rng):
    order = list(range(n))
    rng.shuffle(order)
    return order


def breed_survivors(agents, genome_length, mutation_rate, rng):
    """
    Builds the gene pool for the next generation, one genome per agent slot.

    Survivors are paired in a random order, each survivor i breeding with the
    next one, survivors[(i + 1) % len(survivors)]. Every survivor produces
    len(agents) // len(survivors) children; a second random order then picks
    len(agents) % len(survivors) survivors to breed one more child each, so
    the pool always matches the population size.

    Args:
        agents (list[NeuralAgent]): The whole population, dead agents included.
        genome_length (int): Genome length for random genomes.
        mutation_rate (float): Per-gene mutation probability passed to breed().
        rng (random.Random): Random source for the pairing orders.

    Returns:
        list[list[int]]: len(agents) genomes.
    """
    population_size = len(agents)
    survivors = [agent for agent in agents if agent.is_alive]
    if not survivors:
        # Nobody survived, start over from a random gene pool
        print("Warning: No agent survived the generation. Generating a random gene pool.")
        return [random_genome(genome_length, rng) for _ in range(population_size)]

    child_count = population_size // len(survivors)
    new_genomes = []

    for i in permutation(len(survivors), rng):
        partner = survivors[(i + 1) % len(survivors)]
        for _ in range(child_count):
            new_genomes.append(survivors[i].breed(partner, mutation_rate))

    # Top up to the target population with some more random pairs
    for i in permutation(len(survivors), rng)[:population_size % len(survivors)]:
        partner = survivors[(i + 1) % len(survivors)]
        new_genomes.append(survivors[i].breed(partner, mutation_rate))

    return new_genomes
