"""NodeStore: persistence boundary for projects, nodes and link tables."""

import logging
from collections import defaultdict

import aiosqlite

from mindplan.db.connection import Database
from mindplan.errors import DuplicateLinkError, StorageError
from mindplan.models import Node, Project

logger = logging.getLogger(__name__)


class NodeStore:
    """Row-level reads and writes. No business rules live here.

    Driver errors surface as StorageError, except a primary-key clash on a
    link table, which surfaces as DuplicateLinkError.
    """

    _UPDATABLE_NODE_FIELDS = {
        "name",
        "description",
        "parent_node_id",
        "position_x",
        "position_y",
        "status",
        "completion",
        "deadline",
        "weight",
        "size",
        "custom_width",
        "custom_height",
    }

    _UPDATABLE_PROJECT_FIELDS = {
        "name",
        "description",
        "start_date",
        "end_date",
        "deadline",
        "status",
    }

    def __init__(self, db: Database) -> None:
        self._db = db

    # -- Guarded primitives --

    async def _execute(self, operation: str, sql: str, params: tuple = ()) -> aiosqlite.Cursor:
        try:
            return await self._db.execute(sql, params)
        except aiosqlite.Error as e:
            logger.warning("Storage error during %s: %s", operation, e)
            raise StorageError(operation, e) from e

    async def _fetchone(self, operation: str, sql: str, params: tuple = ()) -> aiosqlite.Row | None:
        try:
            return await self._db.fetchone(sql, params)
        except aiosqlite.Error as e:
            logger.warning("Storage error during %s: %s", operation, e)
            raise StorageError(operation, e) from e

    async def _fetchall(self, operation: str, sql: str, params: tuple = ()) -> list[aiosqlite.Row]:
        try:
            return await self._db.fetchall(sql, params)
        except aiosqlite.Error as e:
            logger.warning("Storage error during %s: %s", operation, e)
            raise StorageError(operation, e) from e

    # -- Projects --

    async def insert_project(self, project: Project) -> None:
        await self._execute(
            "insert_project",
            """
            INSERT INTO projects
                (id, name, description, start_date, end_date, deadline, status, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                project.id,
                project.name,
                project.description,
                project.start_date,
                project.end_date,
                project.deadline,
                project.status,
                project.created_at,
            ),
        )

    async def get_project(self, project_id: str) -> Project | None:
        row = await self._fetchone(
            "get_project", "SELECT * FROM projects WHERE id = ?", (project_id,)
        )
        if row is None:
            return None
        return Project(**dict(row))

    async def list_projects(self) -> list[Project]:
        """All projects, newest first."""
        rows = await self._fetchall(
            "list_projects",
            "SELECT * FROM projects ORDER BY created_at DESC, rowid DESC",
        )
        return [Project(**dict(row)) for row in rows]

    async def update_project(self, project_id: str, **fields: object) -> None:
        unknown = set(fields) - self._UPDATABLE_PROJECT_FIELDS
        if unknown:
            raise ValueError(f"Not updatable on projects: {sorted(unknown)}")
        if not fields:
            return
        assignments = ", ".join(f"{name} = ?" for name in fields)
        await self._execute(
            "update_project",
            f"UPDATE projects SET {assignments} WHERE id = ?",
            (*fields.values(), project_id),
        )

    async def delete_project(self, project_id: str) -> None:
        await self._execute(
            "delete_project", "DELETE FROM projects WHERE id = ?", (project_id,)
        )

    async def get_project_rollups(self) -> dict[str, tuple[int, float | None]]:
        """Per project: (node count, mean completion of root nodes or None)."""
        rows = await self._fetchall(
            "get_project_rollups",
            """
            SELECT
                project_id,
                COUNT(*) AS node_count,
                AVG(CASE WHEN parent_node_id IS NULL THEN completion END) AS root_completion
            FROM project_nodes
            GROUP BY project_id
            """,
        )
        return {
            row["project_id"]: (row["node_count"], row["root_completion"])
            for row in rows
        }

    # -- Nodes --

    async def insert_node(self, node: Node) -> None:
        await self._execute(
            "insert_node",
            """
            INSERT INTO project_nodes
                (id, project_id, name, description, parent_node_id, position_x,
                 position_y, status, completion, deadline, weight, size,
                 custom_width, custom_height, is_task_node, task_id, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                node.id,
                node.project_id,
                node.name,
                node.description,
                node.parent_node_id,
                node.position_x,
                node.position_y,
                node.status,
                node.completion,
                node.deadline,
                node.weight,
                node.size,
                node.custom_width,
                node.custom_height,
                int(node.is_task_node),
                node.task_id,
                node.created_at,
            ),
        )

    async def get_node(self, node_id: str) -> Node | None:
        row = await self._fetchone(
            "get_node", "SELECT * FROM project_nodes WHERE id = ?", (node_id,)
        )
        if row is None:
            return None
        return Node(**dict(row))

    async def get_children(self, parent_node_id: str) -> list[Node]:
        rows = await self._fetchall(
            "get_children",
            "SELECT * FROM project_nodes WHERE parent_node_id = ? ORDER BY created_at, rowid",
            (parent_node_id,),
        )
        return [Node(**dict(row)) for row in rows]

    async def get_nodes_for_project(self, project_id: str) -> list[Node]:
        """Flat node list for a project, ordered by creation."""
        rows = await self._fetchall(
            "get_nodes_for_project",
            "SELECT * FROM project_nodes WHERE project_id = ? ORDER BY created_at, rowid",
            (project_id,),
        )
        return [Node(**dict(row)) for row in rows]

    async def update_node(self, node_id: str, **fields: object) -> None:
        unknown = set(fields) - self._UPDATABLE_NODE_FIELDS
        if unknown:
            raise ValueError(f"Not updatable on project_nodes: {sorted(unknown)}")
        if not fields:
            return
        assignments = ", ".join(f"{name} = ?" for name in fields)
        await self._execute(
            "update_node",
            f"UPDATE project_nodes SET {assignments} WHERE id = ?",
            (*fields.values(), node_id),
        )

    async def delete_nodes(self, node_ids: list[str]) -> int:
        """Delete the given nodes and their link rows. Returns nodes removed."""
        if not node_ids:
            return 0
        placeholders = ", ".join("?" for _ in node_ids)
        params = tuple(node_ids)
        await self._execute(
            "delete_nodes",
            f"DELETE FROM node_tasks WHERE node_id IN ({placeholders})",
            params,
        )
        await self._execute(
            "delete_nodes",
            f"DELETE FROM node_reminders WHERE node_id IN ({placeholders})",
            params,
        )
        cursor = await self._execute(
            "delete_nodes",
            f"DELETE FROM project_nodes WHERE id IN ({placeholders})",
            params,
        )
        return cursor.rowcount

    async def delete_nodes_for_project(self, project_id: str) -> int:
        """Delete every node of a project together with its link rows."""
        row = await self._fetchone(
            "delete_nodes_for_project",
            "SELECT COUNT(*) AS c FROM project_nodes WHERE project_id = ?",
            (project_id,),
        )
        await self._execute(
            "delete_nodes_for_project",
            "DELETE FROM node_tasks WHERE node_id IN "
            "(SELECT id FROM project_nodes WHERE project_id = ?)",
            (project_id,),
        )
        await self._execute(
            "delete_nodes_for_project",
            "DELETE FROM node_reminders WHERE node_id IN "
            "(SELECT id FROM project_nodes WHERE project_id = ?)",
            (project_id,),
        )
        await self._execute(
            "delete_nodes_for_project",
            "DELETE FROM project_nodes WHERE project_id = ?",
            (project_id,),
        )
        return row["c"]

    async def get_subnode_counts(self, project_id: str) -> dict[str, int]:
        rows = await self._fetchall(
            "get_subnode_counts",
            "SELECT parent_node_id, COUNT(*) AS cnt FROM project_nodes "
            "WHERE project_id = ? AND parent_node_id IS NOT NULL GROUP BY parent_node_id",
            (project_id,),
        )
        return {r["parent_node_id"]: r["cnt"] for r in rows}

    # -- Link tables --

    async def insert_task_link(self, node_id: str, task_id: int) -> None:
        await self._insert_link("task", "node_tasks", "task_id", node_id, task_id)

    async def insert_reminder_link(self, node_id: str, reminder_id: int) -> None:
        await self._insert_link(
            "reminder", "node_reminders", "reminder_id", node_id, reminder_id,
        )

    async def delete_task_link(self, node_id: str, task_id: int) -> bool:
        cursor = await self._execute(
            "delete_task_link",
            "DELETE FROM node_tasks WHERE node_id = ? AND task_id = ?",
            (node_id, task_id),
        )
        return cursor.rowcount > 0

    async def delete_reminder_link(self, node_id: str, reminder_id: int) -> bool:
        cursor = await self._execute(
            "delete_reminder_link",
            "DELETE FROM node_reminders WHERE node_id = ? AND reminder_id = ?",
            (node_id, reminder_id),
        )
        return cursor.rowcount > 0

    async def get_task_links(self, project_id: str) -> dict[str, list[int]]:
        """Linked task ids per node, for every node of a project."""
        rows = await self._fetchall(
            "get_task_links",
            "SELECT nt.node_id, nt.task_id FROM node_tasks nt "
            "JOIN project_nodes pn ON pn.id = nt.node_id "
            "WHERE pn.project_id = ? ORDER BY nt.task_id",
            (project_id,),
        )
        links: dict[str, list[int]] = defaultdict(list)
        for r in rows:
            links[r["node_id"]].append(r["task_id"])
        return dict(links)

    async def get_reminder_links(self, project_id: str) -> dict[str, list[int]]:
        """Linked reminder ids per node, for every node of a project."""
        rows = await self._fetchall(
            "get_reminder_links",
            "SELECT nr.node_id, nr.reminder_id FROM node_reminders nr "
            "JOIN project_nodes pn ON pn.id = nr.node_id "
            "WHERE pn.project_id = ? ORDER BY nr.reminder_id",
            (project_id,),
        )
        links: dict[str, list[int]] = defaultdict(list)
        for r in rows:
            links[r["node_id"]].append(r["reminder_id"])
        return dict(links)

    async def _insert_link(
        self, kind: str, table: str, column: str, node_id: str, target_id: int,
    ) -> None:
        try:
            await self._db.execute(
                f"INSERT INTO {table} (node_id, {column}) VALUES (?, ?)",
                (node_id, target_id),
            )
        except aiosqlite.IntegrityError as e:
            raise DuplicateLinkError(kind, node_id, target_id) from e
        except aiosqlite.Error as e:
            logger.warning("Storage error during insert_%s_link: %s", kind, e)
            raise StorageError(f"insert_{kind}_link", e) from e
