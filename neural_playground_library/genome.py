# neural_playground_library/genome.py
"""
Bit-packed genes describing the connections of an agent's neural network.

A gene is a 32 bit unsigned integer laid out as follows:

    bit 31      src type  (1 = inner neuron, 0 = sensor neuron)
    bits 24-30  src id    (7 bits)
    bit 23      sink type (1 = inner neuron, 0 = action neuron)
    bits 16-22  sink id   (7 bits)
    bits 0-15   weight    (16 bits, decoded into (-4.0, 4.0])

Every 32 bit value is a valid gene. Ids are reduced modulo the size of the
layer they address when the network is wired, so they never go out of range.
"""
import random

GENE_BITS = 32
GENE_MASK = 0xFFFFFFFF
ID_MASK = 0x7F
WEIGHT_MASK = 0xFFFF
WEIGHT_BIAS = 32767
WEIGHT_SCALE = 8192.0
MAX_FLIPPED_BITS = 3


def decode_src(gene):
    """Returns (is_inner, id) of the connection source."""
    return bool(gene >> 31 & 1), gene >> 24 & ID_MASK


def decode_sink(gene):
    """Returns (is_inner, id) of the connection sink."""
    return bool(gene >> 23 & 1), gene >> 16 & ID_MASK


def decode_weight(gene):
    """
    Maps the low 16 bits linearly onto (-4.0, 4.0].

    0x0000 decodes to -32767/8192 (just above -4.0) and 0xFFFF to exactly 4.0.
    """
    return ((gene & WEIGHT_MASK) - WEIGHT_BIAS) / WEIGHT_SCALE


def encode_gene(src_inner, src_id, sink_inner, sink_id, raw_weight):
    """Packs the connection fields into a gene. Out of range fields are masked."""
    return ((int(bool(src_inner)) << 31)
            | ((src_id & ID_MASK) << 24)
            | (int(bool(sink_inner)) << 23)
            | ((sink_id & ID_MASK) << 16)
            | (raw_weight & WEIGHT_MASK))


def random_gene(rng=random):
    return rng.getrandbits(GENE_BITS)


def random_genome(length, rng=random):
    return [random_gene(rng) for _ in range(length)]


def mutate(gene, rng=random):
    """
    Flips between 1 and MAX_FLIPPED_BITS distinct bits of the gene.

    Args:
        gene (int): The gene to mutate.
        rng (random.Random): Random source.

    Returns:
        int: The mutated gene, always differing from the input.
    """
    flips = rng.randint(1, MAX_FLIPPED_BITS)
    for bit in rng.sample(range(GENE_BITS), flips):
        gene ^= 1 << bit
    return gene & GENE_MASK


def crossover(genome_a, genome_b, rng=random):
    """
    Mixes two genomes of equal length gene by gene.

    A shuffled ordering of the gene positions is drawn; positions at even
    places of that ordering inherit parent A's gene and positions at odd
    places inherit parent B's gene. Each child gene is a verbatim copy of the
    gene at the same position in one parent.

    Args:
        genome_a (list[int]): First parent genome.
        genome_b (list[int]): Second parent genome.
        rng (random.Random): Random source.

    Returns:
        list[int]: The child genome.

    Raises:
        ValueError: If the genomes differ in length.
    """
    if len(genome_a) != len(genome_b):
        raise ValueError(
            f"Cannot cross genomes of different length ({len(genome_a)} != {len(genome_b)})")

    parents = (genome_a, genome_b)
    positions = list(range(len(genome_a)))
    rng.shuffle(positions)

    child = [0] * len(genome_a)
    for i, pos in enumerate(positions):
        child[pos] = parents[i % 2][pos]
    return child


def genome_to_hex(genome):
    """Compact representation used in reports, e.g. '1a2b3c4d 00ff00ff'."""
    return " ".join(f"{gene:08x}" for gene in genome)
