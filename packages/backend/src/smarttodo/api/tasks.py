"""Task API routes.

Learn: Every route here requires the authentication gate (applied at
include_router level in api/__init__.py). Routes on a single task also
depend on get_owned_task, which loads the task and checks ownership —
the handler receives the already-loaded row and never looks it up again.

- POST   /tasks        create (owner = caller)
- GET    /tasks        caller's tasks, optional status/priority filters
- GET    /tasks/{id}   one task (owner only)
- PUT    /tasks/{id}   partial update (owner only)
- DELETE /tasks/{id}   delete (owner only)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from smarttodo.auth.dependencies import (
    AuthenticatedContext,
    get_current_user,
    get_owned_task,
    get_task_service,
)
from smarttodo.db.models import Task
from smarttodo.schemas.task import (
    TaskCreate,
    TaskEnvelope,
    TaskListEnvelope,
    TaskRead,
    TaskUpdate,
)
from smarttodo.services.results import unwrap
from smarttodo.services.task_service import TaskService

router = APIRouter(prefix="/tasks")


@router.post("", response_model=TaskEnvelope, status_code=201)
async def create_task(
    body: TaskCreate,
    identity: AuthenticatedContext = Depends(get_current_user),
    svc: TaskService = Depends(get_task_service),
):
    """Create a task owned by the caller."""
    task = unwrap(
        await svc.create_task(
            owner_id=identity.account_id,
            title=body.title,
            description=body.description,
            status=body.status,
            priority=body.priority,
            due_date=body.due_date,
        )
    )
    return TaskEnvelope(data=TaskRead.model_validate(task))


@router.get("", response_model=TaskListEnvelope)
async def list_tasks(
    status: Optional[str] = Query(None, description="Filter by status"),
    priority: Optional[str] = Query(None, description="Filter by priority"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    identity: AuthenticatedContext = Depends(get_current_user),
    svc: TaskService = Depends(get_task_service),
):
    """List the caller's tasks, newest first."""
    tasks = await svc.list_tasks(
        owner_id=identity.account_id,
        status=status,
        priority=priority,
        limit=limit,
        offset=offset,
    )
    return TaskListEnvelope(
        count=len(tasks), data=[TaskRead.model_validate(t) for t in tasks]
    )


@router.get("/{task_id}", response_model=TaskEnvelope)
async def get_task(task: Task = Depends(get_owned_task)):
    return TaskEnvelope(data=TaskRead.model_validate(task))


@router.put("/{task_id}", response_model=TaskEnvelope)
async def update_task(
    body: TaskUpdate,
    task: Task = Depends(get_owned_task),
    svc: TaskService = Depends(get_task_service),
):
    """Partially update a task. Only fields sent in the body change."""
    updated = unwrap(await svc.update_task(task, body.model_dump(exclude_unset=True)))
    return TaskEnvelope(data=TaskRead.model_validate(updated))


@router.delete("/{task_id}")
async def delete_task(
    task: Task = Depends(get_owned_task),
    svc: TaskService = Depends(get_task_service),
):
    await svc.delete_task(task)
    return {"success": True, "data": {}}
