"""Error kinds raised by the project/node engine.

Three families: ValidationError (the request can never succeed as given),
NotFoundError (an id does not resolve), StorageError (the database failed).
The transport layer maps each family to a status code.
"""


class ValidationError(Exception):
    pass


class NotFoundError(Exception):
    pass


class StorageError(Exception):
    def __init__(self, operation: str, cause: Exception) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"Storage failure during {operation}: {cause}")


# -- Validation --


class MissingFieldError(ValidationError):
    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Missing required field: {field}")


class InvalidDateError(ValidationError):
    def __init__(self, field: str, value: object) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Invalid ISO 8601 date for {field}: {value!r}")


class InvalidCompletionError(ValidationError):
    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Completion must be a number, got {value!r}")


class CyclicParentError(ValidationError):
    def __init__(self, node_id: str, parent_node_id: str) -> None:
        self.node_id = node_id
        self.parent_node_id = parent_node_id
        super().__init__(
            f"Cannot move node {node_id} under {parent_node_id}: "
            "the new parent is the node itself or one of its descendants"
        )


class CrossProjectParentError(ValidationError):
    def __init__(self, parent_node_id: str, project_id: str) -> None:
        self.parent_node_id = parent_node_id
        self.project_id = project_id
        super().__init__(
            f"Parent node {parent_node_id} does not belong to project {project_id}"
        )


class DuplicateLinkError(ValidationError):
    def __init__(self, kind: str, node_id: str, target_id: int) -> None:
        self.kind = kind
        self.node_id = node_id
        self.target_id = target_id
        super().__init__(f"{kind.capitalize()} is already linked to this node")


# -- Not found --


class ProjectNotFoundError(NotFoundError):
    def __init__(self, project_id: str) -> None:
        self.project_id = project_id
        super().__init__(f"Project not found: {project_id}")


class NodeNotFoundError(NotFoundError):
    def __init__(self, node_id: str) -> None:
        self.node_id = node_id
        super().__init__(f"Node not found: {node_id}")


class ParentNotFoundError(NotFoundError):
    def __init__(self, parent_node_id: str) -> None:
        self.parent_node_id = parent_node_id
        super().__init__(f"Parent node not found: {parent_node_id}")


class LinkNotFoundError(NotFoundError):
    def __init__(self, kind: str, node_id: str, target_id: int) -> None:
        self.kind = kind
        self.node_id = node_id
        self.target_id = target_id
        super().__init__(f"{kind.capitalize()} {target_id} is not linked to node {node_id}")
