"""Task API routes.

Learn: These routes are the HTTP interface to TaskService. The service
handles ownership scoping and caching; routes only translate HTTP to
service calls. Every route here needs a bearer token — the identity's
email becomes the service's owner.

Key patterns:
- POST creates and returns only the new id
- PUT replaces title/description/completed, answers an empty 200
- DELETE answers an empty 204
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from taskmanager.auth.dependencies import CurrentIdentity, get_current_user
from taskmanager.cache import ResponseCache, get_cache
from taskmanager.db.engine import get_db
from taskmanager.schemas.task import TaskCreate, TaskCreated, TaskRead, TaskUpdate
from taskmanager.services.task_service import TaskService

router = APIRouter()


def _task_svc(
    db: AsyncSession = Depends(get_db),
    cache: ResponseCache = Depends(get_cache),
    identity: CurrentIdentity = Depends(get_current_user),
) -> TaskService:
    return TaskService(db, cache, owner=identity.email)


@router.post("/tasks", response_model=TaskCreated, status_code=201)
async def add_task(body: TaskCreate, svc: TaskService = Depends(_task_svc)):
    """Create a task owned by the caller."""
    task = await svc.add_task(
        title=body.title,
        description=body.description,
        completed=body.completed,
    )
    return TaskCreated(id=task.id)


@router.get("/tasks", response_model=list[TaskRead])
async def list_tasks(svc: TaskService = Depends(_task_svc)):
    """List the caller's tasks."""
    return await svc.list_tasks()


@router.get("/tasks/{task_id}", response_model=TaskRead)
async def get_task(task_id: int, svc: TaskService = Depends(_task_svc)):
    """Get one of the caller's tasks by ID."""
    return await svc.get_task(task_id)


@router.put("/tasks/{task_id}", status_code=200)
async def update_task(
    task_id: int,
    body: TaskUpdate,
    svc: TaskService = Depends(_task_svc),
):
    """Replace a task's fields."""
    await svc.update_task(
        task_id=task_id,
        title=body.title,
        description=body.description,
        completed=body.completed,
    )
    return Response(status_code=200)


@router.delete("/tasks/{task_id}", status_code=204)
async def delete_task(task_id: int, svc: TaskService = Depends(_task_svc)):
    """Delete a task."""
    await svc.delete_task(task_id)
    return Response(status_code=204)
