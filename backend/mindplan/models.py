"""Canonical data structures for Mindplan.

Defined once here, referenced everywhere else. These mirror the rows of the
``projects`` and ``project_nodes`` tables; request/response shapes live in
``mindplan.projects.schemas``.
"""

from pydantic import BaseModel

COMPLETION_MIN = 0.0
COMPLETION_MAX = 100.0

DEFAULT_PROJECT_STATUS = "active"
DEFAULT_NODE_STATUS = "pending"
DEFAULT_NODE_POSITION = 100.0
DEFAULT_NODE_WEIGHT = 1.0
DEFAULT_NODE_SIZE = "medium"


class Project(BaseModel):
    id: str
    name: str
    description: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    deadline: str | None = None
    status: str = DEFAULT_PROJECT_STATUS
    created_at: str


class Node(BaseModel):
    id: str
    project_id: str
    name: str
    description: str | None = None
    parent_node_id: str | None = None
    position_x: float = DEFAULT_NODE_POSITION
    position_y: float = DEFAULT_NODE_POSITION
    status: str = DEFAULT_NODE_STATUS
    completion: float = COMPLETION_MIN
    deadline: str | None = None
    weight: float = DEFAULT_NODE_WEIGHT  # stored only; aggregation is a plain mean
    size: str = DEFAULT_NODE_SIZE
    custom_width: int | None = None
    custom_height: int | None = None
    is_task_node: bool = False
    task_id: int | None = None
    created_at: str