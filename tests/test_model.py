import math

import pytest

from neural_playground_library import (CollaboratorError, NeuralAgent, SelectionWorld,
                                       oscillator_value)
from neural_playground_library.genome import encode_gene
from neural_playground_library.model import RUNNING


def occupied_cells(model):
    return {tuple(cell) for cell in zip(*model.world.occupancy.nonzero())}


def agent_cells(model):
    return {agent.pos for agent in model.population}


def test_initial_population_on_distinct_cells(small_world):
    assert len(small_world.population) == 10
    assert len(agent_cells(small_world)) == 10
    assert occupied_cells(small_world) == agent_cells(small_world)
    assert small_world.tick == 0
    assert small_world.phase == RUNNING


@pytest.mark.parametrize("kwargs", [
    {"width": 2, "height": 2, "population_size": 5},
    {"population_size": 0},
    {"inner_count": 0},
    {"genome_length": 0},
    {"osc_period": 0},
    {"sensor_count": 0},
    {"selection_policy": "nowhere"},
])
def test_invalid_configuration(kwargs):
    params = {"width": 8, "height": 8, "population_size": 4, "seed": 1}
    params.update(kwargs)
    with pytest.raises(ValueError):
        SelectionWorld(**params)


def test_oscillator_values():
    assert oscillator_value(25, 100) == pytest.approx(0.5)
    assert oscillator_value(0, 100) == pytest.approx(1.0)
    assert oscillator_value(50, 100) == pytest.approx(0.0)
    assert oscillator_value(125, 100) == pytest.approx(0.5)


def test_simulation_step_advances_tick_and_oscillator(small_world):
    assert small_world.simulation_step() == 1
    assert small_world.world.osc_value == pytest.approx(0.5 + 0.5 * math.cos(2 * math.pi / 10))
    assert small_world.simulation_step() == 2
    assert all(agent.age == 2 for agent in small_world.population)


def test_occupancy_stays_consistent_while_running(small_world):
    for _ in range(4):
        small_world.simulation_step()
        assert occupied_cells(small_world) == agent_cells(small_world)
        assert len(agent_cells(small_world)) == small_world.population_size


def mover_and_watcher(watcher_first):
    model = SelectionWorld(width=8, height=8, population_size=2, genome_length=4,
                           osc_period=1000, max_dist=5, ticks_per_generation=5, seed=13)
    mover, watcher = model.population
    model.world.clear_occupancy()
    # Saturated oscillator -> move links; the oscillator is ~1.0 early in a long period
    mover.reset([encode_gene(False, 6, False, 1, 0xFFFF)] * 4, (0, 0))
    mover.facing = 0 # E
    # Forward distance sensor with no effective outputs, the watcher never acts
    watcher.reset([encode_gene(False, 5, True, 0, 32767)] * 4, (2, 0))
    watcher.facing = 4 # W
    model.world.occupy(mover.pos)
    model.world.occupy(watcher.pos)
    if watcher_first:
        model.population.reverse()
    model.simulation_step()
    return mover, watcher


def test_later_agents_sense_earlier_moves_in_the_same_tick():
    mover, watcher = mover_and_watcher(watcher_first=False)
    assert mover.pos == (1, 0)
    assert watcher.pos == (2, 0)
    assert watcher.sensor_layer[5].potential == pytest.approx(1 / 5)


def test_earlier_agents_sense_the_previous_layout():
    mover, watcher = mover_and_watcher(watcher_first=True)
    assert mover.pos == (1, 0)
    assert watcher.sensor_layer[5].potential == pytest.approx(2 / 5)


def test_apply_selection_is_idempotent(small_world):
    world = small_world.world
    world.clear_selection_area()
    world.selection_area[:6, :] = True

    first = small_world.apply_selection()
    dead_first = [agent.unique_id for agent in small_world.population if not agent.is_alive]
    second = small_world.apply_selection()
    dead_second = [agent.unique_id for agent in small_world.population if not agent.is_alive]

    assert first == second
    assert dead_first == dead_second
    assert first == sum(1 for agent in small_world.population if agent.pos[0] < 6)


def test_everybody_dies_without_selection_area(small_world):
    small_world.world.clear_selection_area()
    assert small_world.apply_selection() == 0
    assert small_world.get_survivor() is None


def test_get_survivor_returns_first_alive(small_world):
    small_world.world.selection_area[:, :] = True
    small_world.apply_selection()
    small_world.population[0].is_alive = False
    assert small_world.get_survivor() is small_world.population[1]


def test_repopulate_resets_every_slot(small_world):
    for _ in range(3):
        small_world.simulation_step()
    small_world.world.clear_selection_area()
    small_world.world.selection_area[:6, :] = True
    small_world.apply_selection()
    agents_before = list(small_world.population)

    small_world.repopulate()

    assert small_world.tick == 0
    assert all(a is b for a, b in zip(small_world.population, agents_before))
    assert all(agent.is_alive and agent.age == 0 for agent in small_world.population)
    assert len(agent_cells(small_world)) == small_world.population_size
    assert occupied_cells(small_world) == agent_cells(small_world)
    assert all(len(agent.genome) == 8 for agent in small_world.population)


def test_no_survivors_gives_random_gene_pool(small_world, monkeypatch):
    def no_breeding(self, partner, mutation_rate):
        raise AssertionError("nobody should breed")

    monkeypatch.setattr(NeuralAgent, "breed", no_breeding)
    for agent in small_world.population:
        agent.is_alive = False

    pool = small_world.breed_survivors()
    assert len(pool) == small_world.population_size
    assert all(len(genome) == small_world.genome_length for genome in pool)


def record_breeding(monkeypatch):
    calls = []
    original = NeuralAgent.breed

    def recording_breed(self, partner, mutation_rate):
        calls.append((self, partner))
        return original(self, partner, mutation_rate)

    monkeypatch.setattr(NeuralAgent, "breed", recording_breed)
    return calls


def test_breeding_within_survivors(monkeypatch):
    model = SelectionWorld(width=6, height=6, population_size=4, genome_length=6, seed=3)
    first, second, third, fourth = model.population
    first.is_alive = False
    third.is_alive = False
    calls = record_breeding(monkeypatch)

    pool = model.breed_survivors()

    assert len(pool) == 4
    assert len(calls) == 4
    assert sorted((a.unique_id, b.unique_id) for a, b in calls) == sorted(
        [(second.unique_id, fourth.unique_id)] * 2 + [(fourth.unique_id, second.unique_id)] * 2)


def test_breeding_tops_up_to_population_size(monkeypatch):
    model = SelectionWorld(width=6, height=6, population_size=5, genome_length=6, seed=5)
    for agent in model.population[2:]:
        agent.is_alive = False
    calls = record_breeding(monkeypatch)

    pool = model.breed_survivors()

    assert len(pool) == 5
    assert len(calls) == 5 # 2 children per survivor + 1 top up
    survivors = set(model.population[:2])
    assert all(a in survivors and b in survivors and a is not b for a, b in calls)


def test_single_survivor_breeds_with_itself(monkeypatch):
    model = SelectionWorld(width=6, height=6, population_size=3, genome_length=6, seed=5)
    model.population[0].is_alive = False
    model.population[1].is_alive = False
    calls = record_breeding(monkeypatch)

    pool = model.breed_survivors()

    assert len(pool) == 3
    assert all(a is model.population[2] and b is model.population[2] for a, b in calls)


def test_run_generation(small_world):
    summary = small_world.run_generation()

    assert summary["generation"] == 0
    assert summary["population"] == 10
    assert 0 <= summary["survivors"] <= 10
    assert summary["survival_rate"] == summary["survivors"] / 10.0
    assert summary["selection_cells"] == small_world.world.selection_cell_count()
    assert summary["median_age"] == 5
    assert summary["collaborator_errors"] == []
    assert small_world.generation == 1
    assert small_world.tick == 0
    assert all(agent.is_alive for agent in small_world.population)


def test_step_closes_generations(small_world):
    for _ in range(small_world.ticks_per_generation):
        small_world.step()
    assert small_world.generation == 1
    assert small_world.tick == 0
    small_world.step()
    assert small_world.tick == 1


def test_observer_failure_does_not_stop_the_run(small_world):
    seen = []

    def broken_exporter(model, summary):
        raise RuntimeError("export failed")

    def recorder(model, summary):
        seen.append(summary["generation"])

    small_world.add_generation_observer(broken_exporter)
    small_world.add_generation_observer(recorder)

    first = small_world.run_generation()
    second = small_world.run_generation()

    assert seen == [0, 1]
    assert len(first["collaborator_errors"]) == 1
    error = first["collaborator_errors"][0]
    assert isinstance(error, CollaboratorError)
    assert isinstance(error.original, RuntimeError)
    assert "broken_exporter" in str(error)
    assert len(second["collaborator_errors"]) == 1


def test_custom_selection_policy_is_regenerated():
    calls = []

    def left_column(world, rng):
        calls.append(rng)
        world.clear_selection_area()
        world.selection_area[0, :] = True

    model = SelectionWorld(width=8, height=8, population_size=4, ticks_per_generation=2,
                           selection_policy=left_column, regenerate_selection=True, seed=9)
    assert model.world.selection_cell_count() == 8
    model.run_generation()
    assert len(calls) == 2


def test_same_seed_same_run():
    params = dict(width=10, height=10, population_size=8, genome_length=6,
                  ticks_per_generation=4, seed=11)
    first = SelectionWorld(**params)
    second = SelectionWorld(**params)
    for _ in range(2):
        first.run_generation()
        second.run_generation()
    assert [a.genome for a in first.population] == [a.genome for a in second.population]
    assert [a.pos for a in first.population] == [a.pos for a in second.population]
