# neural_playground_library/selection_areas.py
"""
Policies that (re)generate the selection area of a world.

Each policy clears world.selection_area and fills it again. Agents that are not
standing on a selection cell when a generation ends do not get to breed.
"""
from .neurons import DIRECTIONS


def central_square(world, rng=None):
    """Marks a square block in the middle of the world (the middle quarter on each axis)."""
    world.clear_selection_area()
    x0, x1 = world.width * 3 // 8, world.width * 5 // 8
    y0, y1 = world.height * 3 // 8, world.height * 5 // 8
    world.selection_area[x0:x1, y0:y1] = True


def random_rectangles(world, rng, count=10, max_side=30):
    """
    Marks `count` axis aligned rectangles at random places.

    Rectangle sides are drawn from [0, max_side) so some rectangles may be empty;
    parts falling outside the grid are cut off.
    """
    if max_side < 1:
        raise ValueError(f"max_side must be at least 1, got {max_side}.")
    world.clear_selection_area()
    for _ in range(count):
        x = rng.randrange(world.width)
        y = rng.randrange(world.height)
        w = rng.randrange(max_side)
        h = rng.randrange(max_side)
        world.selection_area[x:min(x + w, world.width), y:min(y + h, world.height)] = True


def random_walk_patches(world, rng, coverage=0.3, max_walk=90):
    """
    Grows irregular patches with random walks until `coverage` of the grid is marked.

    Each walk starts from a random cell and takes up to `max_walk` steps in random
    compass directions, staying inside the grid.
    """
    world.clear_selection_area()
    total_cells = world.width * world.height
    target = min(total_cells, int(round(coverage * total_cells)))
    marked = 0
    while marked < target:
        x = rng.randrange(world.width)
        y = rng.randrange(world.height)
        for _ in range(rng.randrange(max_walk + 1)):
            if not world.selection_area[x, y]:
                world.selection_area[x, y] = True
                marked += 1
                if marked >= target:
                    return
            dx, dy = rng.choice(DIRECTIONS)
            if world.in_bounds(x + dx, y + dy):
                x, y = x + dx, y + dy


SELECTION_POLICIES = {
    "central_square": central_square,
    "random_rectangles": random_rectangles,
    "random_walk_patches": random_walk_patches,
}
