"""Response shapes for the KanbanFlow API."""

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    TypeAdapter,
    field_validator,
)

# JSON numbers: int stays int, float stays float, nothing else is coerced
Number = StrictInt | StrictFloat


class KanbanFlowModel(BaseModel):
    """Base for all remote shapes.

    Unknown fields are dropped, wire names are kept via aliases and are
    the only names accepted. Optional fields may be absent but never null.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator("*", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("must not be null")
        return value

    def to_json_dict(self) -> dict[str, Any]:
        """Dump using wire names, leaving absent optional fields absent."""
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")


class TaskNumber(KanbanFlowModel):
    """Task number with prefix and value (e.g. KV-12)."""

    prefix: StrictStr | None = None
    value: Number


class TaskCollaborator(KanbanFlowModel):
    """Collaborator reference on a task."""

    user_id: StrictStr = Field(alias="userId")


class Task(KanbanFlowModel):
    """A single task."""

    id: StrictStr = Field(alias="_id")
    name: StrictStr
    description: StrictStr | None = None
    color: StrictStr
    column_id: StrictStr = Field(alias="columnId")
    swimlane_id: StrictStr | None = Field(default=None, alias="swimlaneId")
    position: Number | None = None
    total_seconds_spent: Number | None = Field(default=None, alias="totalSecondsSpent")
    total_seconds_estimate: Number | None = Field(default=None, alias="totalSecondsEstimate")
    points_estimate: Number | None = Field(default=None, alias="pointsEstimate")
    number: TaskNumber | None = None
    responsible_user_id: StrictStr | None = Field(default=None, alias="responsibleUserId")
    collaborators: list[TaskCollaborator] | None = None
    grouping_date: StrictStr | None = Field(default=None, alias="groupingDate")
    # Opaque, passed through verbatim
    dates: list[Any] | None = None
    sub_tasks: list[Any] | None = Field(default=None, alias="subTasks")
    labels: list[Any] | None = None
    custom_fields: list[Any] | None = Field(default=None, alias="customFields")


class BoardColumn(KanbanFlowModel):
    """Board column."""

    name: StrictStr
    unique_id: StrictStr = Field(alias="uniqueId")


class BoardSwimlane(KanbanFlowModel):
    """Board swimlane."""

    name: StrictStr
    unique_id: StrictStr = Field(alias="uniqueId")


class BoardColor(KanbanFlowModel):
    """Board color definition."""

    name: StrictStr
    value: StrictStr
    description: StrictStr | None = None


class Board(KanbanFlowModel):
    """Board structure: columns, swimlanes and colors."""

    id: StrictStr = Field(alias="_id")
    name: StrictStr
    columns: list[BoardColumn]
    swimlanes: list[BoardSwimlane] | None = None
    colors: list[BoardColor] | None = None


class TasksColumnResponse(KanbanFlowModel):
    """One page of tasks for a single column."""

    column_id: StrictStr = Field(alias="columnId")
    column_name: StrictStr = Field(alias="columnName")
    tasks_limited: StrictBool = Field(alias="tasksLimited")
    next_task_id: StrictStr | None = Field(default=None, alias="nextTaskId")
    tasks: list[Task]


class User(KanbanFlowModel):
    """Board member."""

    id: StrictStr = Field(alias="_id")
    full_name: StrictStr = Field(alias="fullName")
    email: StrictStr | None = None


class Comment(KanbanFlowModel):
    """Comment on a task."""

    id: StrictStr = Field(alias="_id")
    task_id: StrictStr | None = Field(default=None, alias="taskId")
    author_user_id: StrictStr = Field(alias="authorUserId")
    text: StrictStr
    created_timestamp: StrictStr | None = Field(default=None, alias="createdTimestamp")


TasksResponse = list[TasksColumnResponse]
UsersResponse = list[User]
CommentsResponse = list[Comment]

BoardAdapter: TypeAdapter[Board] = TypeAdapter(Board)
TaskAdapter: TypeAdapter[Task] = TypeAdapter(Task)
TasksResponseAdapter: TypeAdapter[TasksResponse] = TypeAdapter(TasksResponse)
UsersResponseAdapter: TypeAdapter[UsersResponse] = TypeAdapter(UsersResponse)
CommentsResponseAdapter: TypeAdapter[CommentsResponse] = TypeAdapter(CommentsResponse)
