"""Project and Task API routes.

Routes translate HTTP to service calls; the service layer owns the
rules. Every route here is behind get_current_user (see api/__init__),
and the user id always comes from the verified token.

Task routes follow one pattern:
- list/create: verify_project_ownership() → 404 if not the caller's
- update/toggle/delete: authorize_task_mutation() → 404 if not the
  caller's, 400 if the task is finished → then the mutation
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tasktrack.auth.dependencies import CurrentIdentity, get_current_user
from tasktrack.db.engine import get_db
from tasktrack.schemas.project import (
    ProjectCreate,
    ProjectUpdate,
    ProjectWithTasks,
    TaskCreate,
    TaskRead,
    TaskToggle,
    TaskUpdate,
)
from tasktrack.services.project_service import ProjectNotFound, ProjectService

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> ProjectService:
    return ProjectService(db)


# ═══════════════════════════════════════════════════════════
# Projects
# ═══════════════════════════════════════════════════════════


@router.get("/projects", response_model=list[ProjectWithTasks])
async def list_projects(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    """List the caller's projects, each with all of its tasks."""
    return await svc.list_projects_with_tasks(identity.user_id)


@router.post("/projects", response_model=ProjectWithTasks, status_code=201)
async def create_project(
    body: ProjectCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    return await svc.create_project(
        user_id=identity.user_id,
        name=body.name,
        description=body.description,
    )


@router.put("/projects/{project_id}", response_model=ProjectWithTasks)
async def update_project(
    project_id: int,
    body: ProjectUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    """Partially update a project (name, description)."""
    return await svc.update_project(
        user_id=identity.user_id,
        project_id=project_id,
        name=body.name,
        description=body.description,
    )


@router.delete("/projects/{project_id}")
async def delete_project(
    project_id: int,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    """Delete a project together with all of its tasks."""
    await svc.delete_project(user_id=identity.user_id, project_id=project_id)
    return {"deleted": True}


# ═══════════════════════════════════════════════════════════
# Tasks
# ═══════════════════════════════════════════════════════════


async def _require_project(svc: ProjectService, project_id: int, user_id: int) -> None:
    if not await svc.verify_project_ownership(project_id, user_id):
        raise ProjectNotFound()


@router.get("/projects/{project_id}/tasks", response_model=list[TaskRead])
async def list_tasks(
    project_id: int,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    await _require_project(svc, project_id, identity.user_id)
    return await svc.list_tasks(project_id)


@router.post("/projects/{project_id}/tasks", response_model=TaskRead, status_code=201)
async def create_task(
    project_id: int,
    body: TaskCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    """Create a task (not completed) in one of the caller's projects."""
    await _require_project(svc, project_id, identity.user_id)
    return await svc.create_task(
        project_id=project_id,
        title=body.title,
        description=body.description,
        finish_date=body.finish_date,
    )


@router.put("/projects/{project_id}/tasks/{task_id}", response_model=TaskRead)
async def update_task(
    project_id: int,
    task_id: int,
    body: TaskUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    """Partially update a task. Finished tasks can't be edited (400)."""
    await svc.authorize_task_mutation(
        task_id, identity.user_id, action="edit", project_id=project_id
    )
    return await svc.update_task(
        task_id,
        title=body.title,
        description=body.description,
        finish_date=body.finish_date,
    )


@router.patch("/projects/{project_id}/tasks/{task_id}/toggle", response_model=TaskRead)
async def toggle_task_completion(
    project_id: int,
    task_id: int,
    body: TaskToggle,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    """Set a task's completion flag. Finished tasks can't be toggled (400)."""
    await svc.authorize_task_mutation(
        task_id, identity.user_id, action="toggle", project_id=project_id
    )
    return await svc.toggle_completion(task_id, body.is_completed)


@router.delete("/projects/{project_id}/tasks/{task_id}")
async def delete_task(
    project_id: int,
    task_id: int,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ProjectService = Depends(_svc),
):
    """Delete a task. Finished tasks can't be deleted (400)."""
    await svc.authorize_task_mutation(
        task_id, identity.user_id, action="delete", project_id=project_id
    )
    await svc.delete_task(task_id)
    return {"deleted": True}
