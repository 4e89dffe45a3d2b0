# run_simulation.py
import os

# Import from the local library package
from neural_playground_library import (
    SelectionWorld,
    config as sim_config
)
from neural_playground_library.genome import genome_to_hex

# Matplotlib for plotting - optional, attempt import
try:
    import matplotlib.pyplot as plt
    plt.switch_backend('Agg')
except ImportError:
    plt = None
    print("Matplotlib not found. End-of-run plotting will be disabled.")


def print_generation_summary(model, summary):
    """Generation observer printing one progress line per generation."""
    print(f"Generation {summary['generation']:5d}: "
          f"{summary['survivors']}/{summary['population']} survived "
          f"({summary['survival_rate'] * 100:.1f}%), "
          f"selection area {summary['selection_coverage'] * 100:.1f}% of the world")


def make_network_reporter(every):
    """Returns an observer printing a survivor's network every `every` generations."""
    def report_survivor_network(model, summary):
        if every <= 0 or summary['generation'] % every != 0:
            return
        survivor = model.get_survivor()
        if survivor is None:
            print("No survivor to show this generation.")
            return
        print(f"Survivor network (genome {genome_to_hex(survivor.genome)}):")
        print(survivor.describe_network())
    return report_survivor_network


def generate_and_save_plots(history, output_dir):
    if not plt:
        print("Matplotlib not available. Skipping plot generation.")
        return
    if not os.path.exists(output_dir):
        try:
            os.makedirs(output_dir)
        except OSError as e:
            print(f"Error creating plot directory {output_dir}: {e}. Plots will not be saved.")
            return

    generations = history['generation']

    plt.figure(figsize=(12, 7))
    plt.plot(generations, [rate * 100 for rate in history['survival_rate']],
             label="Survivors", marker='.', linestyle='-')
    plt.plot(generations, [coverage * 100 for coverage in history['selection_coverage']],
             label="Selection area", linestyle='--')
    plt.title("Survival over Generations", fontsize=16)
    plt.xlabel("Generation", fontsize=14)
    plt.ylabel("Percent", fontsize=14)
    plt.legend(fontsize=12)
    plt.grid(True, linestyle=':', alpha=0.7)
    plt.tight_layout()
    plot_path = os.path.join(output_dir, "survival_over_generations.png")
    try:
        plt.savefig(plot_path)
        print(f"Saved survival plot to {plot_path}")
    except Exception as e:
        print(f"Error saving survival plot: {e}")
    plt.close()

    plt.figure(figsize=(12, 7))
    plt.plot(generations, history['median_responsiveness'],
             label="Median Responsiveness", marker='.', color='green')
    plt.title("Median Responsiveness over Generations", fontsize=16)
    plt.xlabel("Generation", fontsize=14)
    plt.ylabel("Responsiveness", fontsize=14)
    plt.legend(fontsize=12)
    plt.grid(True, linestyle=':', alpha=0.7)
    plt.tight_layout()
    plot_path = os.path.join(output_dir, "responsiveness_over_generations.png")
    try:
        plt.savefig(plot_path)
        print(f"Saved responsiveness plot to {plot_path}")
    except Exception as e:
        print(f"Error saving responsiveness plot: {e}")
    plt.close()


def run_simulation(number_of_generations=sim_config.NUMBER_OF_GENERATIONS, seed=None):
    world = SelectionWorld(seed=seed)
    world.add_generation_observer(print_generation_summary)
    world.add_generation_observer(make_network_reporter(sim_config.REPORT_NETWORK_EVERY))
    print(f"Population size: {world.population_size}, "
          f"grid {world.world.width}x{world.world.height}, "
          f"{world.ticks_per_generation} ticks per generation")

    history = {key: [] for key in ('generation', 'survival_rate', 'selection_coverage',
                                   'median_responsiveness')}
    best_summary = None

    for _ in range(number_of_generations):
        summary = world.run_generation()
        for key in history:
            history[key].append(summary[key])
        if summary['collaborator_errors']:
            print(f"{len(summary['collaborator_errors'])} observer(s) failed in generation "
                  f"{summary['generation']}; continuing.")
        if best_summary is None or summary['survivors'] > best_summary['survivors']:
            best_summary = summary
            print(f"New best generation {summary['generation']} with {summary['survivors']} survivors")

    print("Simulation finished.")

    if plt and history['generation']:
        generate_and_save_plots(history, sim_config.PLOT_OUTPUT_DIR)
    return history


if __name__ == '__main__':
    run_simulation()
