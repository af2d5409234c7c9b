"""Project service: ownership checks and task lifecycle rules.

Every project belongs to one user, and every task belongs to the user
who owns its project. The rules enforced here:

1. Ownership before mutation. Project-level operations take the
   caller's user_id and only ever match rows owned by them. A project
   that exists but belongs to someone else is reported exactly like a
   missing one (NotFoundError) so ids can't be probed.
2. Task-level mutations go through authorize_task_mutation() first:
   Task ⋈ Project filtered by the owner, then the finished check.
3. Finished tasks are read-only. A task is finished once its
   finish_date has passed, whether or not it is completed.
4. Deleting a project deletes its tasks in the same transaction
   (and the schema's ON DELETE CASCADE backs that up).

The data-fetching helpers (list_tasks, create_task, update_task,
toggle_completion, delete_task) do no authorization themselves; the
API layer gates them with verify_project_ownership() or
authorize_task_mutation().

Concurrent updates to the same row are last-writer-wins; there is no
version column.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Optional, Union

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tasktrack.db.models import Project, Task, utcnow
from tasktrack.errors import ImmutableStateError, NotFoundError

logger = structlog.get_logger()

FinishDateInput = Union[date, datetime, str, None]


# ═══════════════════════════════════════════════════════════
# Finished-task rule
# ═══════════════════════════════════════════════════════════


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_task_finished(
    finish_date: Optional[datetime], now: Optional[datetime] = None
) -> bool:
    """True once ``finish_date`` is set and strictly in the past.

    Independent of is_completed. Tasks without a finish date are never
    finished.
    """
    if finish_date is None:
        return False
    now = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    return _as_utc(finish_date) < now


def parse_finish_date(value: FinishDateInput) -> Optional[datetime]:
    """Normalize a finish date to an aware UTC datetime.

    A bare date (or "YYYY-MM-DD" string) means midnight UTC of that day.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = date.fromisoformat(value)
    if isinstance(value, datetime):
        return _as_utc(value)
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


class ProjectNotFound(NotFoundError):
    default_message = "Project not found"


class TaskNotFound(NotFoundError):
    default_message = "Task not found"


@dataclass(frozen=True)
class TaskOwnership:
    """A task together with the project that makes the caller its owner."""

    task: Task
    project: Project


# ═══════════════════════════════════════════════════════════
# Service
# ═══════════════════════════════════════════════════════════


class ProjectService:
    """Business logic for projects and their tasks."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Projects ────────────────────────────────────────

    async def list_projects_with_tasks(self, user_id: int) -> list[Project]:
        """All projects owned by ``user_id``, each with its tasks loaded."""
        result = await self.db.execute(
            select(Project)
            .where(Project.user_id == user_id)
            .options(selectinload(Project.tasks))
            .order_by(Project.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def create_project(
        self, user_id: int, name: str, description: Optional[str] = None
    ) -> Project:
        project = Project(user_id=user_id, name=name, description=description, tasks=[])
        self.db.add(project)
        await self.db.commit()
        logger.info("project.created", project_id=project.id, user_id=user_id)
        return project

    async def update_project(
        self,
        user_id: int,
        project_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Project:
        """Apply the given fields to an owned project. None means unchanged.

        Raises NotFoundError if the project is missing or not owned.
        """
        project = await self._get_owned_project(project_id, user_id, with_tasks=True)

        if name is not None:
            project.name = name
        if description is not None:
            project.description = description
        project.updated_at = utcnow()

        await self.db.commit()
        logger.info("project.updated", project_id=project_id, user_id=user_id)
        return project

    async def delete_project(self, user_id: int, project_id: int) -> None:
        """Delete an owned project and all of its tasks, atomically.

        Raises NotFoundError if the project is missing or not owned.
        """
        project = await self._get_owned_project(project_id, user_id)

        result = await self.db.execute(delete(Task).where(Task.project_id == project.id))
        await self.db.execute(delete(Project).where(Project.id == project.id))
        await self.db.commit()
        logger.info(
            "project.deleted",
            project_id=project_id,
            user_id=user_id,
            tasks_deleted=result.rowcount,
        )

    async def verify_project_ownership(self, project_id: int, user_id: int) -> bool:
        result = await self.db.execute(
            select(Project.id)
            .where(Project.id == project_id, Project.user_id == user_id)
            .limit(1)
        )
        return result.first() is not None

    async def _get_owned_project(
        self, project_id: int, user_id: int, with_tasks: bool = False
    ) -> Project:
        # Existence and ownership are one query, so both fail the same way.
        query = select(Project).where(
            Project.id == project_id, Project.user_id == user_id
        )
        if with_tasks:
            query = query.options(selectinload(Project.tasks)).execution_options(
                populate_existing=True
            )
        result = await self.db.execute(query)
        project = result.scalars().first()
        if project is None:
            raise ProjectNotFound()
        return project

    # ─── Tasks: reads and creation ───────────────────────

    async def list_tasks(self, project_id: int) -> list[Task]:
        """All tasks of a project. Caller must have checked ownership."""
        result = await self.db.execute(
            select(Task).where(Task.project_id == project_id).order_by(Task.id)
        )
        return list(result.scalars().all())

    async def get_task(self, task_id: int) -> Optional[Task]:
        return await self.db.get(Task, task_id)

    async def create_task(
        self,
        project_id: int,
        title: str,
        description: Optional[str] = None,
        finish_date: FinishDateInput = None,
    ) -> Task:
        """Create an open (not completed) task. Caller must have checked ownership."""
        task = Task(
            project_id=project_id,
            title=title,
            description=description,
            finish_date=parse_finish_date(finish_date),
            is_completed=False,
        )
        self.db.add(task)
        await self.db.commit()
        logger.info("task.created", task_id=task.id, project_id=project_id)
        return task

    # ─── Tasks: ownership gate ───────────────────────────

    async def verify_task_ownership(self, task_id: int, user_id: int) -> TaskOwnership:
        """Load a task and its project, provided ``user_id`` owns the project.

        Raises NotFoundError if the task doesn't exist or belongs to
        someone else.
        """
        result = await self.db.execute(
            select(Task, Project)
            .join(Project, Task.project_id == Project.id)
            .where(Task.id == task_id, Project.user_id == user_id)
            .limit(1)
        )
        row = result.first()
        if row is None:
            raise TaskNotFound()
        return TaskOwnership(task=row.Task, project=row.Project)

    @staticmethod
    def ensure_task_mutable(task: Task, action: str = "modify") -> None:
        """Raise ImmutableStateError if the task's finish date has passed."""
        if is_task_finished(task.finish_date):
            raise ImmutableStateError(f"Cannot {action} finished tasks")

    async def authorize_task_mutation(
        self,
        task_id: int,
        user_id: int,
        action: str = "modify",
        project_id: Optional[int] = None,
    ) -> TaskOwnership:
        """The gate every task update/toggle/delete passes through.

        1. The caller owns the task's project (else NotFoundError).
        2. If ``project_id`` is given, the task lives in that project
           (else NotFoundError).
        3. The task isn't finished (else ImmutableStateError).
        """
        ownership = await self.verify_task_ownership(task_id, user_id)
        if project_id is not None and ownership.project.id != project_id:
            raise TaskNotFound()
        self.ensure_task_mutable(ownership.task, action)
        return ownership

    # ─── Tasks: mutations (gate first!) ──────────────────

    async def update_task(
        self,
        task_id: int,
        title: Optional[str] = None,
        description: Optional[str] = None,
        finish_date: FinishDateInput = None,
    ) -> Task:
        """Apply the given fields to a task. None means unchanged.

        Does not re-check the finished rule; call authorize_task_mutation()
        first.
        """
        task = await self._require_task(task_id)

        if title is not None:
            task.title = title
        if description is not None:
            task.description = description
        if finish_date is not None:
            task.finish_date = parse_finish_date(finish_date)
        task.updated_at = utcnow()

        await self.db.commit()
        logger.info("task.updated", task_id=task_id)
        return task

    async def toggle_completion(self, task_id: int, is_completed: bool) -> Task:
        """Set the completion flag. Call authorize_task_mutation() first."""
        task = await self._require_task(task_id)
        task.is_completed = is_completed
        task.updated_at = utcnow()

        await self.db.commit()
        logger.info("task.completion_set", task_id=task_id, is_completed=is_completed)
        return task

    async def delete_task(self, task_id: int) -> None:
        """Delete a task for good. Call authorize_task_mutation() first."""
        result = await self.db.execute(delete(Task).where(Task.id == task_id))
        if result.rowcount == 0:
            raise TaskNotFound()
        await self.db.commit()
        logger.info("task.deleted", task_id=task_id)

    async def _require_task(self, task_id: int) -> Task:
        task = await self.get_task(task_id)
        if task is None:
            raise TaskNotFound()
        return task
