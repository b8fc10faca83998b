"""Shared test helpers. Grows with each subphase."""

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

import pytest
from httpx import AsyncClient

from mindplan.models import Node, Project
from mindplan.nodes.store import NodeStore
from mindplan.nodes.tree import ProjectTree
from mindplan.projects.schemas import CreateNodeRequest, CreateProjectRequest
from mindplan.projects.service import ProjectService


def make_project(project_id: str | None = None, name: str = "Test Project", **overrides: Any) -> Project:
    """Create a Project record for direct store tests."""
    fields: dict[str, Any] = {
        "id": project_id or str(uuid4()),
        "name": name,
        "description": "Test Description",
        "start_date": "2023-01-01",
        "end_date": "2023-12-31",
        "deadline": "2023-12-31",
        "created_at": datetime.now(UTC).isoformat(),
    }
    fields.update(overrides)
    return Project(**fields)


def make_node(
    project_id: str,
    node_id: str | None = None,
    name: str = "Node",
    parent_node_id: str | None = None,
    completion: float = 0.0,
    **overrides: Any,
) -> Node:
    """Create a Node record for direct store/mutator tests."""
    return Node(
        id=node_id or str(uuid4()),
        project_id=project_id,
        name=name,
        parent_node_id=parent_node_id,
        completion=completion,
        created_at=datetime.now(UTC).isoformat(),
        **overrides,
    )


async def assert_tree_consistent(store: NodeStore, project_id: str) -> None:
    """Check the stored tree: bounds, mean rule, same-project parents, no orphans, no cycles."""
    nodes = await store.get_nodes_for_project(project_id)
    tree = ProjectTree(nodes)
    by_id = {n.id: n for n in nodes}

    for node in nodes:
        assert 0 <= node.completion <= 100, f"{node.name} out of bounds: {node.completion}"

        ancestors: set[str] = set()
        current = node.parent_node_id
        while current is not None:
            assert current in by_id, f"{node.name} has a missing ancestor {current}"
            assert current != node.id and current not in ancestors, f"{node.name} is its own ancestor"
            ancestors.add(current)
            current = by_id[current].parent_node_id

        children = tree.children_of(node.id)
        if children:
            mean = sum(c.completion for c in children) / len(children)
            assert node.completion == pytest.approx(mean), (
                f"{node.name} holds {node.completion}, children average {mean}"
            )


# -- Service-level helpers --


async def create_service_project(
    service: ProjectService,
    name: str = "Test Project",
    start_date: str = "2023-01-01",
    end_date: str = "2023-12-31",
    **overrides: Any,
):
    """Create a project through the service and return the response."""
    return await service.create_project(CreateProjectRequest(
        name=name,
        description="Test Description",
        start_date=start_date,
        end_date=end_date,
        **overrides,
    ))


async def add_service_node(
    service: ProjectService,
    project_id: str,
    name: str = "Node",
    parent_node_id: str | None = None,
    **overrides: Any,
):
    """Add a node through the service and return the response."""
    return await service.add_node(project_id, CreateNodeRequest(
        name=name, parent_node_id=parent_node_id, **overrides,
    ))


async def build_parent_with_children(
    service: ProjectService, completions: list[float],
) -> dict:
    """Create a project with root P and one child per completion value.

    Returns {"project_id": str, "parent_id": str, "child_ids": [str, ...]}.
    """
    project = await create_service_project(service)
    parent = await add_service_node(service, project.id, name="P")
    child_ids = []
    for i, value in enumerate(completions):
        child = await add_service_node(
            service, project.id, name=f"C{i + 1}", parent_node_id=parent.id,
        )
        await service.update_node_completion(child.id, value)
        child_ids.append(child.id)
    return {"project_id": project.id, "parent_id": parent.id, "child_ids": child_ids}


# -- API-level helpers --


async def create_test_project(
    client: AsyncClient,
    name: str = "Test Project",
    start_date: str = "2023-01-01",
    end_date: str = "2023-12-31",
) -> dict:
    """Create a project via the API and return the response JSON."""
    resp = await client.post("/api/projects", json={
        "name": name,
        "description": "Test Description",
        "start_date": start_date,
        "end_date": end_date,
    })
    assert resp.status_code == 201
    return resp.json()


async def create_test_node(
    client: AsyncClient,
    project_id: str,
    name: str = "Node",
    parent_node_id: str | None = None,
) -> dict:
    """Add a node via the API and return the response JSON."""
    body: dict = {"name": name}
    if parent_node_id is not None:
        body["parent_node_id"] = parent_node_id
    resp = await client.post(f"/api/projects/{project_id}/nodes", json=body)
    assert resp.status_code == 201
    return resp.json()


async def create_chain(client: AsyncClient) -> dict:
    """Create a project with a chain: P -> C -> G.

    Returns {"project_id": str, "node_ids": {"P": str, "C": str, "G": str}}
    """
    project = await create_test_project(client, name="Chain Project")
    project_id = project["id"]
    p = await create_test_node(client, project_id, name="P")
    c = await create_test_node(client, project_id, name="C", parent_node_id=p["id"])
    g = await create_test_node(client, project_id, name="G", parent_node_id=c["id"])
    return {
        "project_id": project_id,
        "node_ids": {"P": p["id"], "C": c["id"], "G": g["id"]},
    }
