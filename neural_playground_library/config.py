# neural_playground_library/config.py

# World Parameters
GRID_WIDTH = 128
GRID_HEIGHT = 128
OSCILLATOR_PERIOD = 5 # Ticks per full cosine wave of the global oscillator

# Population Parameters
POPULATION_SIZE = 1000
GENOME_LENGTH = 5 # Number of genes (= network connections) per agent
INNER_NEURON_COUNT = 3
MAX_SENSE_DISTANCE = 30 # How far along a direction the distance sensors look
MUTATION_RATE = 0.05 # Per-gene probability of mutation when breeding

# Generation Parameters
TICKS_PER_GENERATION = 100
NUMBER_OF_GENERATIONS = 1000

# Selection area
# One of the names in selection_areas.SELECTION_POLICIES
SELECTION_POLICY = "random_rectangles"
REGENERATE_SELECTION_EACH_GENERATION = False

# Action tuning
RESPONSIVENESS_STEP = 0.05 # Change applied by the responsiveness action
INITIAL_RESPONSIVENESS = 1.0

# Reporting
REPORT_NETWORK_EVERY = 50 # Print a survivor's network every N generations (0 disables)
PLOT_OUTPUT_DIR = "simulation_plots"
