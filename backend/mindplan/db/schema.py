"""Database schema DDL. All tables use CREATE IF NOT EXISTS for idempotency."""

import logging

import aiosqlite

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS projects (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT,
    start_date TEXT,
    end_date TEXT,
    deadline TEXT,
    status TEXT NOT NULL DEFAULT 'active',
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_projects_created_at ON projects(created_at);

CREATE TABLE IF NOT EXISTS project_nodes (
    id TEXT PRIMARY KEY,
    project_id TEXT NOT NULL,
    name TEXT NOT NULL,
    parent_node_id TEXT,
    position_x REAL NOT NULL DEFAULT 100,
    position_y REAL NOT NULL DEFAULT 100,
    completion REAL NOT NULL DEFAULT 0,
    deadline TEXT,
    created_at TEXT NOT NULL,
    FOREIGN KEY (project_id) REFERENCES projects(id) ON DELETE CASCADE,
    FOREIGN KEY (parent_node_id) REFERENCES project_nodes(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_project_nodes_project_id ON project_nodes(project_id);
CREATE INDEX IF NOT EXISTS idx_project_nodes_parent_node_id ON project_nodes(parent_node_id);

CREATE TABLE IF NOT EXISTS node_tasks (
    node_id TEXT NOT NULL,
    task_id INTEGER NOT NULL,
    PRIMARY KEY (node_id, task_id),
    FOREIGN KEY (node_id) REFERENCES project_nodes(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS node_reminders (
    node_id TEXT NOT NULL,
    reminder_id INTEGER NOT NULL,
    PRIMARY KEY (node_id, reminder_id),
    FOREIGN KEY (node_id) REFERENCES project_nodes(id) ON DELETE CASCADE
);
"""

# Columns added to project_nodes after the first release. Databases created
# by older builds only have the columns in SCHEMA_SQL above.
_MIGRATIONS = [
    "ALTER TABLE project_nodes ADD COLUMN description TEXT",
    "ALTER TABLE project_nodes ADD COLUMN status TEXT NOT NULL DEFAULT 'pending'",
    "ALTER TABLE project_nodes ADD COLUMN weight REAL NOT NULL DEFAULT 1",
    "ALTER TABLE project_nodes ADD COLUMN size TEXT NOT NULL DEFAULT 'medium'",
    "ALTER TABLE project_nodes ADD COLUMN custom_width INTEGER",
    "ALTER TABLE project_nodes ADD COLUMN custom_height INTEGER",
    "ALTER TABLE project_nodes ADD COLUMN is_task_node INTEGER NOT NULL DEFAULT 0",
    "ALTER TABLE project_nodes ADD COLUMN task_id INTEGER",
]


async def run_migrations(db: object) -> None:
    """Apply column migrations. Already-applied ones are skipped."""
    for sql in _MIGRATIONS:
        try:
            await db.execute(sql)
        except aiosqlite.OperationalError as e:
            if "duplicate column name" not in str(e):
                raise
            logger.debug("Migration already applied: %s", sql)
