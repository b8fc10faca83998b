"""Randomised mutation sequences: the tree must stay consistent after every step.

Each seed drives a different mix of attach / set_completion / reparent /
delete_subtree calls. Rejected moves (cycles) are expected and must leave the
tree untouched.
"""

import random

import pytest

from mindplan.errors import CyclicParentError
from mindplan.nodes.tree import ProjectTree
from tests.fixtures import assert_tree_consistent, make_node, make_project

STEPS = 40


async def _random_step(rng: random.Random, mutator, store, project_id: str) -> None:
    nodes = await store.get_nodes_for_project(project_id)
    ids = [n.id for n in nodes]
    action = rng.choice(["attach", "attach", "complete", "complete", "reparent", "delete"])

    if action == "attach" or not ids:
        parent_id = rng.choice([None, *ids])
        await mutator.attach(make_node(project_id, name=f"N{len(ids)}"), parent_id)
    elif action == "complete":
        # leaves only; a value written onto a parent is an override, not a mean
        tree = ProjectTree(nodes)
        leaves = [i for i in ids if not tree.children_of(i)]
        await mutator.set_completion(rng.choice(leaves), rng.uniform(-20, 120))
    elif action == "reparent":
        node_id = rng.choice(ids)
        new_parent_id = rng.choice([None, *ids])
        before = await store.get_nodes_for_project(project_id)
        try:
            await mutator.reparent(node_id, new_parent_id)
        except CyclicParentError:
            assert await store.get_nodes_for_project(project_id) == before
    else:
        await mutator.delete_subtree(rng.choice(ids))


@pytest.mark.parametrize("seed", range(8))
async def test_random_sequences_keep_tree_consistent(seed, mutator, store):
    rng = random.Random(seed)
    project = make_project()
    await store.insert_project(project)

    for _ in range(STEPS):
        await _random_step(rng, mutator, store, project.id)
        await assert_tree_consistent(store, project.id)


@pytest.mark.parametrize("seed", range(4))
async def test_deleted_subtree_leaves_no_orphans(seed, mutator, store):
    """After deleting any node, none of its former descendants survive."""
    rng = random.Random(seed)
    project = make_project()
    await store.insert_project(project)
    for i in range(15):
        ids = [n.id for n in await store.get_nodes_for_project(project.id)]
        await mutator.attach(make_node(project.id, name=f"N{i}"), rng.choice([None, *ids]))

    nodes = await store.get_nodes_for_project(project.id)
    target = rng.choice(nodes).id
    expected = set(ProjectTree(nodes).subtree_ids(target))

    removed = await mutator.delete_subtree(target)

    assert set(removed) == expected
    remaining = {n.id for n in await store.get_nodes_for_project(project.id)}
    assert remaining.isdisjoint(expected)
    await assert_tree_consistent(store, project.id)
