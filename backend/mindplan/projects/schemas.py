"""Request and response schemas for project and node endpoints."""

from pydantic import BaseModel, Field

from mindplan.models import Node, Project

# -- Requests --


class CreateProjectRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    deadline: str | None = None


class UpdateProjectDeadlineRequest(BaseModel):
    deadline: str


class CreateNodeRequest(BaseModel):
    name: str
    description: str | None = None
    parent_node_id: str | None = None
    position_x: float | None = None
    position_y: float | None = None
    status: str | None = None
    deadline: str | None = None
    weight: float | None = None


class PatchNodeRequest(BaseModel):
    """Fields to update on a node. Only fields present in the request body are changed."""

    name: str | None = None
    description: str | None = None
    status: str | None = None
    weight: float | None = None
    completion: float | None = None


class UpdateCompletionRequest(BaseModel):
    completion: float


class UpdateParentRequest(BaseModel):
    parent_node_id: str | None = None


class UpdatePositionRequest(BaseModel):
    position_x: float
    position_y: float


class UpdateDeadlineRequest(BaseModel):
    deadline: str | None


class UpdateSizeRequest(BaseModel):
    size: str | None = None
    custom_width: int | None = None
    custom_height: int | None = None


class LinkTaskRequest(BaseModel):
    task_id: int


class LinkTaskAsSubnodeRequest(BaseModel):
    task_id: int
    name: str | None = None


class LinkReminderRequest(BaseModel):
    reminder_id: int


# -- Responses --


class NodeResponse(Node):
    subnode_count: int = 0
    tasks: list[int] = Field(default_factory=list)
    reminders: list[int] = Field(default_factory=list)


class ProjectResponse(Project):
    completion: float = 0.0
    node_count: int = 0
    time_progress: float = 0.0
    days_elapsed: int = 0
    days_remaining: int = 0
    is_overdue: bool = False


class ProjectDetailResponse(BaseModel):
    project: ProjectResponse
    nodes: list[NodeResponse] = Field(default_factory=list)


class DeleteNodeResponse(BaseModel):
    id: str
    deleted_node_ids: list[str]


class DeleteProjectResponse(BaseModel):
    id: str
    deleted_node_count: int


class TaskLinkResponse(BaseModel):
    node_id: str
    task_id: int


class ReminderLinkResponse(BaseModel):
    node_id: str
    reminder_id: int
