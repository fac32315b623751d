"""Routes handling task CRUD operations for the authenticated caller."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...core.validation import validate_body
from ...deps import CurrentUserDependency, TaskServiceDependency, require_current_user
from ...models import Task, User
from ...schemas import MessageResponse, TaskCreate, TaskListResponse, TaskRead, TaskUpdate
from ...validators import CREATE_TASK_RULES, UPDATE_TASK_RULES

router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],
    dependencies=[Depends(require_current_user)],
)

StatusQuery = Annotated[
    str | None,
    Query(description="Only return tasks with this status."),
]
PriorityQuery = Annotated[
    str | None,
    Query(description="Only return tasks with this priority."),
]
SortQuery = Annotated[
    str | None,
    Query(alias="sortBy", description="Sort field: `createdAt` (default) or `priority`."),
]
OrderQuery = Annotated[
    str | None,
    Query(description="`asc` for ascending; anything else sorts descending."),
]
PageQuery = Annotated[int, Query(ge=1, description="1-based page number.")]
LimitQuery = Annotated[
    int,
    Query(ge=1, description="Page size; values above the configured maximum are capped."),
]


def _require_user_id(user: User) -> int:
    if user.id is None:  # pragma: no cover - persisted users always carry an id
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authenticated user is missing an identifier.",
        )
    return user.id


def _map_task(task: Task) -> TaskRead:
    return TaskRead.model_validate(task)


@router.post(
    "",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a task owned by the caller",
    dependencies=[Depends(validate_body(CREATE_TASK_RULES))],
)
async def create_task(
    payload: TaskCreate,
    current_user: CurrentUserDependency,
    service: TaskServiceDependency,
) -> TaskRead:
    task = await service.create_task(
        owner_id=_require_user_id(current_user),
        title=payload.title,
        description=payload.description,
        priority=payload.priority,
        status=payload.status,
    )
    return _map_task(task)


@router.get(
    "",
    response_model=TaskListResponse,
    summary="List the caller's tasks with filtering, sorting and pagination",
)
async def list_tasks(
    current_user: CurrentUserDependency,
    service: TaskServiceDependency,
    status: StatusQuery = None,
    priority: PriorityQuery = None,
    sort_by: SortQuery = None,
    order: OrderQuery = None,
    page: PageQuery = 1,
    limit: LimitQuery = 10,
) -> TaskListResponse:
    result = await service.list_tasks(
        _require_user_id(current_user),
        status=status,
        priority=priority,
        sort_by=sort_by,
        order=order,
        page=page,
        limit=limit,
    )
    return TaskListResponse(
        total=result.total,
        page=result.page,
        limit=result.limit,
        tasks=[_map_task(task) for task in result.tasks],
    )


@router.get(
    "/{task_id}",
    response_model=TaskRead,
    summary="Retrieve one of the caller's tasks",
)
async def get_task(
    task_id: int,
    current_user: CurrentUserDependency,
    service: TaskServiceDependency,
) -> TaskRead:
    task = await service.get_task(owner_id=_require_user_id(current_user), task_id=task_id)
    return _map_task(task)


@router.put(
    "/{task_id}",
    response_model=TaskRead,
    summary="Partially update one of the caller's tasks",
    dependencies=[Depends(validate_body(UPDATE_TASK_RULES))],
)
async def update_task(
    task_id: int,
    payload: TaskUpdate,
    current_user: CurrentUserDependency,
    service: TaskServiceDependency,
) -> TaskRead:
    task = await service.update_task(
        owner_id=_require_user_id(current_user),
        task_id=task_id,
        changes=payload.model_dump(exclude_unset=True),
    )
    return _map_task(task)


@router.delete(
    "/{task_id}",
    response_model=MessageResponse,
    summary="Delete one of the caller's tasks",
)
async def delete_task(
    task_id: int,
    current_user: CurrentUserDependency,
    service: TaskServiceDependency,
) -> MessageResponse:
    await service.delete_task(owner_id=_require_user_id(current_user), task_id=task_id)
    return MessageResponse(message="Task deleted successfully")
