"""Project service: the façade every project and node operation goes through.

Each mutating method runs inside one database transaction covering the
structural change and the full upward propagation, then reads back the
refreshed view.
"""

import logging
from datetime import UTC, datetime
from uuid import uuid4

from mindplan.db.connection import Database
from mindplan.errors import (
    InvalidDateError,
    LinkNotFoundError,
    MissingFieldError,
    NodeNotFoundError,
    ProjectNotFoundError,
)
from mindplan.models import (
    DEFAULT_NODE_POSITION,
    DEFAULT_NODE_STATUS,
    DEFAULT_NODE_WEIGHT,
    DEFAULT_PROJECT_STATUS,
    Node,
    Project,
)
from mindplan.nodes.mutator import TreeMutator
from mindplan.nodes.store import NodeStore
from mindplan.nodes.tree import ProjectTree
from mindplan.projects.progress import is_iso_date, project_completion, time_progress
from mindplan.projects.schemas import (
    CreateNodeRequest,
    CreateProjectRequest,
    DeleteNodeResponse,
    DeleteProjectResponse,
    NodeResponse,
    PatchNodeRequest,
    ProjectDetailResponse,
    ProjectResponse,
    ReminderLinkResponse,
    TaskLinkResponse,
    UpdateSizeRequest,
)

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(UTC).isoformat()


def _require_text(field: str, value: str | None) -> str:
    if value is None or not value.strip():
        raise MissingFieldError(field)
    return value.strip()


def _require_date(field: str, value: str | None) -> str | None:
    if value is not None and not is_iso_date(value):
        raise InvalidDateError(field, value)
    return value


class ProjectService:
    """Project CRUD and node operations over an injected Database handle."""

    def __init__(self, db: Database) -> None:
        self._db = db
        self._store = NodeStore(db)
        self._mutator = TreeMutator(self._store)

    # -- Projects --

    async def create_project(self, request: CreateProjectRequest) -> ProjectResponse:
        """Create a project. name, start_date and end_date are required."""
        name = _require_text("name", request.name)
        start_date = _require_date("start_date", _require_text("start_date", request.start_date))
        end_date = _require_date("end_date", _require_text("end_date", request.end_date))
        deadline = _require_date("deadline", request.deadline) or end_date

        project = Project(
            id=str(uuid4()),
            name=name,
            description=request.description,
            start_date=start_date,
            end_date=end_date,
            deadline=deadline,
            status=DEFAULT_PROJECT_STATUS,
            created_at=_now(),
        )
        async with self._db.transaction():
            await self._store.insert_project(project)
        logger.info("Created project %s (%s)", project.id, project.name)
        return self._project_response(project, node_count=0, completion=0.0)

    async def list_projects(self) -> list[ProjectResponse]:
        """All projects, newest first, with completion and time progress."""
        projects = await self._store.list_projects()
        rollups = await self._store.get_project_rollups()
        responses = []
        for project in projects:
            node_count, root_completion = rollups.get(project.id, (0, None))
            responses.append(
                self._project_response(
                    project,
                    node_count=node_count,
                    completion=root_completion or 0.0,
                )
            )
        return responses

    async def get_project_with_nodes(self, project_id: str) -> ProjectDetailResponse:
        """A project with its full flat node list, ordered by creation."""
        project = await self._require_project(project_id)
        nodes = await self._store.get_nodes_for_project(project_id)
        tree = ProjectTree(nodes)

        subnode_counts = await self._store.get_subnode_counts(project_id)
        task_links = await self._store.get_task_links(project_id)
        reminder_links = await self._store.get_reminder_links(project_id)

        return ProjectDetailResponse(
            project=self._project_response(
                project,
                node_count=len(nodes),
                completion=project_completion([n.completion for n in tree.roots()]),
            ),
            nodes=[
                NodeResponse(
                    **node.model_dump(),
                    subnode_count=subnode_counts.get(node.id, 0),
                    tasks=task_links.get(node.id, []),
                    reminders=reminder_links.get(node.id, []),
                )
                for node in nodes
            ],
        )

    async def update_project_deadline(self, project_id: str, deadline: str) -> ProjectResponse:
        """Move a project's deadline. The end date moves with it."""
        _require_date("deadline", _require_text("deadline", deadline))
        async with self._db.transaction():
            await self._require_project(project_id)
            await self._store.update_project(project_id, deadline=deadline, end_date=deadline)
        detail = await self.get_project_with_nodes(project_id)
        return detail.project

    async def delete_project(self, project_id: str) -> DeleteProjectResponse:
        """Delete a project together with every node it owns."""
        async with self._db.transaction():
            await self._require_project(project_id)
            removed = await self._store.delete_nodes_for_project(project_id)
            await self._store.delete_project(project_id)
        logger.info("Deleted project %s with %d nodes", project_id, removed)
        return DeleteProjectResponse(id=project_id, deleted_node_count=removed)

    # -- Nodes --

    async def add_node(self, project_id: str, request: CreateNodeRequest) -> NodeResponse:
        """Add a node as a root, or under request.parent_node_id. Starts at 0% complete."""
        name = _require_text("name", request.name)
        _require_date("deadline", request.deadline)

        async with self._db.transaction():
            await self._require_project(project_id)
            node = Node(
                id=str(uuid4()),
                project_id=project_id,
                name=name,
                description=request.description,
                position_x=request.position_x if request.position_x is not None else DEFAULT_NODE_POSITION,
                position_y=request.position_y if request.position_y is not None else DEFAULT_NODE_POSITION,
                status=request.status or DEFAULT_NODE_STATUS,
                completion=0.0,
                deadline=request.deadline,
                weight=request.weight if request.weight is not None else DEFAULT_NODE_WEIGHT,
                created_at=_now(),
            )
            node = await self._mutator.attach(node, request.parent_node_id)
            return await self._node_response(node)

    async def add_subnode(
        self, project_id: str, parent_node_id: str, request: CreateNodeRequest,
    ) -> NodeResponse:
        """Add a node under parent_node_id, ignoring any parent in the body."""
        request = request.model_copy(update={"parent_node_id": parent_node_id})
        return await self.add_node(project_id, request)

    async def update_node(self, node_id: str, request: PatchNodeRequest) -> NodeResponse:
        """Update descriptive fields. A completion value goes through the clamp-and-propagate path."""
        fields = {
            name: getattr(request, name)
            for name in request.model_fields_set
            if name != "completion"
        }
        if "name" in fields:
            fields["name"] = _require_text("name", fields["name"])
        # status and weight are NOT NULL columns; an explicit null leaves them as they are
        for name in ("status", "weight"):
            if fields.get(name, 0) is None:
                del fields[name]

        async with self._db.transaction():
            await self._require_node(node_id)
            await self._store.update_node(node_id, **fields)
            if "completion" in request.model_fields_set and request.completion is not None:
                node = await self._mutator.set_completion(node_id, request.completion)
            else:
                node = await self._require_node(node_id)
            return await self._node_response(node)

    async def update_node_completion(self, node_id: str, completion: object) -> NodeResponse:
        """Set a node's completion (clamped to [0, 100]) and recompute its ancestors."""
        async with self._db.transaction():
            node = await self._mutator.set_completion(node_id, completion)
            return await self._node_response(node)

    async def update_node_parent(self, node_id: str, parent_node_id: str | None) -> NodeResponse:
        """Move a node (and its subtree) under another parent, or make it a root."""
        async with self._db.transaction():
            node = await self._mutator.reparent(node_id, parent_node_id)
            return await self._node_response(node)

    async def update_node_position(
        self, node_id: str, position_x: float, position_y: float,
    ) -> NodeResponse:
        async with self._db.transaction():
            await self._require_node(node_id)
            await self._store.update_node(node_id, position_x=position_x, position_y=position_y)
            return await self._node_response(await self._require_node(node_id))

    async def update_node_deadline(self, node_id: str, deadline: str | None) -> NodeResponse:
        _require_date("deadline", deadline)
        async with self._db.transaction():
            await self._require_node(node_id)
            await self._store.update_node(node_id, deadline=deadline)
            return await self._node_response(await self._require_node(node_id))

    async def update_node_size(self, node_id: str, request: UpdateSizeRequest) -> NodeResponse:
        """Presentation hints only. Absent fields are left alone."""
        fields = {name: getattr(request, name) for name in request.model_fields_set}
        if fields.get("size", "") is None:
            del fields["size"]
        async with self._db.transaction():
            await self._require_node(node_id)
            await self._store.update_node(node_id, **fields)
            return await self._node_response(await self._require_node(node_id))

    async def delete_node(self, node_id: str) -> DeleteNodeResponse:
        """Delete a node and its whole subtree, then rebalance the former parent's chain."""
        async with self._db.transaction():
            removed = await self._mutator.delete_subtree(node_id)
        return DeleteNodeResponse(id=node_id, deleted_node_ids=removed)

    # -- Task and reminder links --

    async def link_task_to_node(self, node_id: str, task_id: int) -> TaskLinkResponse:
        async with self._db.transaction():
            await self._require_node(node_id)
            await self._store.insert_task_link(node_id, task_id)
        logger.info("Linked task %s to node %s", task_id, node_id)
        return TaskLinkResponse(node_id=node_id, task_id=task_id)

    async def unlink_task_from_node(self, node_id: str, task_id: int) -> TaskLinkResponse:
        async with self._db.transaction():
            await self._require_node(node_id)
            if not await self._store.delete_task_link(node_id, task_id):
                raise LinkNotFoundError("task", node_id, task_id)
        return TaskLinkResponse(node_id=node_id, task_id=task_id)

    async def link_reminder_to_node(self, node_id: str, reminder_id: int) -> ReminderLinkResponse:
        async with self._db.transaction():
            await self._require_node(node_id)
            await self._store.insert_reminder_link(node_id, reminder_id)
        logger.info("Linked reminder %s to node %s", reminder_id, node_id)
        return ReminderLinkResponse(node_id=node_id, reminder_id=reminder_id)

    async def unlink_reminder_from_node(
        self, node_id: str, reminder_id: int,
    ) -> ReminderLinkResponse:
        async with self._db.transaction():
            await self._require_node(node_id)
            if not await self._store.delete_reminder_link(node_id, reminder_id):
                raise LinkNotFoundError("reminder", node_id, reminder_id)
        return ReminderLinkResponse(node_id=node_id, reminder_id=reminder_id)

    async def link_task_as_subnode(
        self, project_id: str, node_id: str, task_id: int, name: str | None = None,
    ) -> NodeResponse:
        """Create a task node wrapping an external task under node_id.

        The new node is an ordinary child for aggregation purposes.
        """
        async with self._db.transaction():
            await self._require_project(project_id)
            node = Node(
                id=str(uuid4()),
                project_id=project_id,
                name=(name or "").strip() or f"Task {task_id}",
                is_task_node=True,
                task_id=task_id,
                created_at=_now(),
            )
            node = await self._mutator.attach(node, node_id)
            return await self._node_response(node)

    # -- Helpers --

    async def _require_project(self, project_id: str) -> Project:
        project = await self._store.get_project(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    async def _require_node(self, node_id: str) -> Node:
        node = await self._store.get_node(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    async def _node_response(self, node: Node) -> NodeResponse:
        children = await self._store.get_children(node.id)
        task_links = await self._store.get_task_links(node.project_id)
        reminder_links = await self._store.get_reminder_links(node.project_id)
        return NodeResponse(
            **node.model_dump(),
            subnode_count=len(children),
            tasks=task_links.get(node.id, []),
            reminders=reminder_links.get(node.id, []),
        )

    @staticmethod
    def _project_response(
        project: Project, *, node_count: int, completion: float,
    ) -> ProjectResponse:
        return ProjectResponse(
            **project.model_dump(),
            completion=completion,
            node_count=node_count,
            **time_progress(project),
        )
