"""FastAPI routes for projects, nodes, and task/reminder links."""

from fastapi import APIRouter, Depends, HTTPException, status

from mindplan.errors import (
    DuplicateLinkError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from mindplan.projects.schemas import (
    CreateNodeRequest,
    CreateProjectRequest,
    DeleteNodeResponse,
    DeleteProjectResponse,
    LinkReminderRequest,
    LinkTaskAsSubnodeRequest,
    LinkTaskRequest,
    NodeResponse,
    PatchNodeRequest,
    ProjectDetailResponse,
    ProjectResponse,
    ReminderLinkResponse,
    TaskLinkResponse,
    UpdateCompletionRequest,
    UpdateDeadlineRequest,
    UpdateParentRequest,
    UpdatePositionRequest,
    UpdateProjectDeadlineRequest,
    UpdateSizeRequest,
)
from mindplan.projects.service import ProjectService

router = APIRouter(prefix="/api/projects", tags=["projects"])


def get_project_service() -> ProjectService:
    """Dependency placeholder; the app lifespan overrides it."""
    raise RuntimeError("ProjectService not initialized")


@router.get("")
async def list_projects(
    service: ProjectService = Depends(get_project_service),
) -> list[ProjectResponse]:
    try:
        return await service.list_projects()
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(
    request: CreateProjectRequest,
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    try:
        return await service.create_project(request)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{project_id}")
async def get_project(
    project_id: str,
    service: ProjectService = Depends(get_project_service),
) -> ProjectDetailResponse:
    try:
        return await service.get_project_with_nodes(project_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/{project_id}/deadline")
async def update_project_deadline(
    project_id: str,
    request: UpdateProjectDeadlineRequest,
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    try:
        return await service.update_project_deadline(project_id, request.deadline)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    service: ProjectService = Depends(get_project_service),
) -> DeleteProjectResponse:
    try:
        return await service.delete_project(project_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/{project_id}/nodes", status_code=status.HTTP_201_CREATED)
async def add_node(
    project_id: str,
    request: CreateNodeRequest,
    service: ProjectService = Depends(get_project_service),
) -> NodeResponse:
    try:
        return await service.add_node(project_id, request)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/{project_id}/nodes/{parent_node_id}/subnodes", status_code=status.HTTP_201_CREATED)
async def add_subnode(
    project_id: str,
    parent_node_id: str,
    request: CreateNodeRequest,
    service: ProjectService = Depends(get_project_service),
) -> NodeResponse:
    try:
        return await service.add_subnode(project_id, parent_node_id, request)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post(
    "/{project_id}/nodes/{node_id}/tasks-as-subnodes",
    status_code=status.HTTP_201_CREATED,
)
async def link_task_as_subnode(
    project_id: str,
    node_id: str,
    request: LinkTaskAsSubnodeRequest,
    service: ProjectService = Depends(get_project_service),
) -> NodeResponse:
    try:
        return await service.link_task_as_subnode(
            project_id, node_id, request.task_id, name=request.name,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/nodes/{node_id}")
async def update_node(
    node_id: str,
    request: PatchNodeRequest,
    service: ProjectService = Depends(get_project_service),
) -> NodeResponse:
    try:
        return await service.update_node(node_id, request)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/nodes/{node_id}/completion")
async def update_node_completion(
    node_id: str,
    request: UpdateCompletionRequest,
    service: ProjectService = Depends(get_project_service),
) -> NodeResponse:
    try:
        return await service.update_node_completion(node_id, request.completion)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/nodes/{node_id}/parent")
async def update_node_parent(
    node_id: str,
    request: UpdateParentRequest,
    service: ProjectService = Depends(get_project_service),
) -> NodeResponse:
    try:
        return await service.update_node_parent(node_id, request.parent_node_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/nodes/{node_id}/position")
async def update_node_position(
    node_id: str,
    request: UpdatePositionRequest,
    service: ProjectService = Depends(get_project_service),
) -> NodeResponse:
    try:
        return await service.update_node_position(
            node_id, request.position_x, request.position_y,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/nodes/{node_id}/deadline")
async def update_node_deadline(
    node_id: str,
    request: UpdateDeadlineRequest,
    service: ProjectService = Depends(get_project_service),
) -> NodeResponse:
    try:
        return await service.update_node_deadline(node_id, request.deadline)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/nodes/{node_id}/size")
async def update_node_size(
    node_id: str,
    request: UpdateSizeRequest,
    service: ProjectService = Depends(get_project_service),
) -> NodeResponse:
    try:
        return await service.update_node_size(node_id, request)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/nodes/{node_id}")
async def delete_node(
    node_id: str,
    service: ProjectService = Depends(get_project_service),
) -> DeleteNodeResponse:
    try:
        return await service.delete_node(node_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/nodes/{node_id}/tasks", status_code=status.HTTP_201_CREATED)
async def link_task(
    node_id: str,
    request: LinkTaskRequest,
    service: ProjectService = Depends(get_project_service),
) -> TaskLinkResponse:
    try:
        return await service.link_task_to_node(node_id, request.task_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DuplicateLinkError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/nodes/{node_id}/tasks/{task_id}")
async def unlink_task(
    node_id: str,
    task_id: int,
    service: ProjectService = Depends(get_project_service),
) -> TaskLinkResponse:
    try:
        return await service.unlink_task_from_node(node_id, task_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/nodes/{node_id}/reminders", status_code=status.HTTP_201_CREATED)
async def link_reminder(
    node_id: str,
    request: LinkReminderRequest,
    service: ProjectService = Depends(get_project_service),
) -> ReminderLinkResponse:
    try:
        return await service.link_reminder_to_node(node_id, request.reminder_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DuplicateLinkError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/nodes/{node_id}/reminders/{reminder_id}")
async def unlink_reminder(
    node_id: str,
    reminder_id: int,
    service: ProjectService = Depends(get_project_service),
) -> ReminderLinkResponse:
    try:
        return await service.unlink_reminder_from_node(node_id, reminder_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))
