"""ProjectService tests: ownership, finished-task rule, cascade delete.

These tests drive the service directly against the test database so
the rules are checked without HTTP in between.
"""

from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from tasktrack.db.models import Task, User
from tasktrack.errors import ImmutableStateError, NotFoundError
from tasktrack.services.project_service import (
    ProjectService,
    is_task_finished,
    parse_finish_date,
)

PAST = "2020-01-01"


def _future() -> date:
    return (datetime.now(timezone.utc) + timedelta(days=30)).date()


@pytest.fixture
async def users(db_session):
    """Two users, A and B."""
    a = User(email="a@x.com", name="A", password_hash="x")
    b = User(email="b@x.com", name="B", password_hash="x")
    db_session.add_all([a, b])
    await db_session.commit()
    return a, b


@pytest.fixture
def svc(db_session):
    return ProjectService(db_session)


async def _task_count(db, project_id: int) -> int:
    result = await db.execute(
        select(func.count()).select_from(Task).where(Task.project_id == project_id)
    )
    return result.scalar_one()


# ═══════════════════════════════════════════════════════════
# Finished-task predicate
# ═══════════════════════════════════════════════════════════


def test_no_finish_date_is_never_finished():
    assert is_task_finished(None) is False


def test_past_and_future_finish_dates():
    now = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)
    assert is_task_finished(now - timedelta(seconds=1), now=now)
    assert not is_task_finished(now + timedelta(seconds=1), now=now)
    assert not is_task_finished(now, now=now)  # strictly before


def test_naive_datetimes_are_treated_as_utc():
    now = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)
    assert is_task_finished(datetime(2026, 6, 1, 11, 59), now=now)
    assert not is_task_finished(datetime(2026, 6, 1, 12, 1), now=now)


def test_parse_finish_date():
    expected = datetime(2020, 1, 1, tzinfo=timezone.utc)
    assert parse_finish_date("2020-01-01") == expected
    assert parse_finish_date(date(2020, 1, 1)) == expected
    assert parse_finish_date(datetime(2020, 1, 1)) == expected
    assert parse_finish_date(None) is None


# ═══════════════════════════════════════════════════════════
# Projects
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_project_starts_empty(svc, users):
    a, _ = users
    project = await svc.create_project(a.id, "Home", "chores")
    assert project.user_id == a.id
    assert project.tasks == []


@pytest.mark.asyncio
async def test_list_only_returns_own_projects_with_tasks(svc, users):
    a, b = users
    p1 = await svc.create_project(a.id, "First")
    p2 = await svc.create_project(a.id, "Second")
    await svc.create_project(b.id, "Not mine")
    await svc.create_task(p1.id, "t1")
    await svc.create_task(p1.id, "t2")

    projects = await svc.list_projects_with_tasks(a.id)
    assert [p.id for p in projects] == [p1.id, p2.id]
    assert [t.title for t in projects[0].tasks] == ["t1", "t2"]
    assert projects[1].tasks == []


@pytest.mark.asyncio
async def test_update_project_applies_partial_fields(svc, users):
    a, _ = users
    project = await svc.create_project(a.id, "Old", "keep me")
    before = project.updated_at
    await svc.create_task(project.id, "t1")

    updated = await svc.update_project(a.id, project.id, name="New")
    assert updated.name == "New"
    assert updated.description == "keep me"
    assert updated.updated_at >= before
    assert [t.title for t in updated.tasks] == ["t1"]


@pytest.mark.asyncio
async def test_other_users_project_is_not_found(svc, users):
    """Someone else's project looks exactly like a missing one."""
    a, b = users
    project = await svc.create_project(a.id, "A's")

    with pytest.raises(NotFoundError) as foreign:
        await svc.update_project(b.id, project.id, name="hijack")
    with pytest.raises(NotFoundError) as missing:
        await svc.update_project(b.id, 9999, name="hijack")
    assert str(foreign.value) == str(missing.value) == "Project not found"

    with pytest.raises(NotFoundError):
        await svc.delete_project(b.id, project.id)

    assert await svc.verify_project_ownership(project.id, a.id) is True
    assert await svc.verify_project_ownership(project.id, b.id) is False
    assert await svc.verify_project_ownership(9999, a.id) is False


@pytest.mark.asyncio
async def test_delete_project_cascades_to_tasks(svc, users, db_session):
    a, _ = users
    project = await svc.create_project(a.id, "Doomed")
    for i in range(3):
        await svc.create_task(project.id, f"t{i}")
    # finished tasks go too
    await svc.create_task(project.id, "old", finish_date=PAST)
    assert await _task_count(db_session, project.id) == 4

    await svc.delete_project(a.id, project.id)

    assert await _task_count(db_session, project.id) == 0
    assert await svc.list_projects_with_tasks(a.id) == []


@pytest.mark.asyncio
async def test_store_cascade_backs_up_project_delete(svc, users, db_session):
    """Deleting the user row removes projects and tasks via ON DELETE CASCADE."""
    a, _ = users
    project = await svc.create_project(a.id, "P")
    await svc.create_task(project.id, "t")

    await db_session.delete(a)
    await db_session.commit()

    assert await _task_count(db_session, project.id) == 0


# ═══════════════════════════════════════════════════════════
# Tasks
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_task_defaults(svc, users):
    a, _ = users
    project = await svc.create_project(a.id, "P")
    task = await svc.create_task(project.id, "Write tests", "soon", finish_date=PAST)

    assert task.is_completed is False
    assert task.finish_date == datetime(2020, 1, 1, tzinfo=timezone.utc)
    assert [t.id for t in await svc.list_tasks(project.id)] == [task.id]


@pytest.mark.asyncio
async def test_verify_task_ownership(svc, users):
    a, b = users
    project = await svc.create_project(a.id, "P")
    task = await svc.create_task(project.id, "t")

    ownership = await svc.verify_task_ownership(task.id, a.id)
    assert ownership.task.id == task.id
    assert ownership.project.id == project.id

    with pytest.raises(NotFoundError):
        await svc.verify_task_ownership(task.id, b.id)
    with pytest.raises(NotFoundError):
        await svc.verify_task_ownership(9999, a.id)


@pytest.mark.asyncio
async def test_authorize_checks_project_of_path(svc, users):
    a, _ = users
    p1 = await svc.create_project(a.id, "P1")
    p2 = await svc.create_project(a.id, "P2")
    task = await svc.create_task(p1.id, "t")

    await svc.authorize_task_mutation(task.id, a.id, project_id=p1.id)
    with pytest.raises(NotFoundError):
        await svc.authorize_task_mutation(task.id, a.id, project_id=p2.id)


@pytest.mark.asyncio
@pytest.mark.parametrize("action", ["edit", "toggle", "delete"])
async def test_finished_task_is_immutable(svc, users, action):
    a, _ = users
    project = await svc.create_project(a.id, "P")
    task = await svc.create_task(project.id, "late", finish_date=PAST)

    with pytest.raises(ImmutableStateError) as exc_info:
        await svc.authorize_task_mutation(task.id, a.id, action=action)
    assert str(exc_info.value) == f"Cannot {action} finished tasks"


@pytest.mark.asyncio
async def test_completed_flag_does_not_affect_finished(svc, users):
    """A completed task with a past finish date is still finished."""
    a, _ = users
    project = await svc.create_project(a.id, "P")
    task = await svc.create_task(project.id, "t", finish_date=_future())
    await svc.toggle_completion(task.id, True)

    await svc.update_task(task.id, finish_date=PAST)
    with pytest.raises(ImmutableStateError):
        await svc.authorize_task_mutation(task.id, a.id)


@pytest.mark.asyncio
async def test_open_tasks_can_be_mutated(svc, users, db_session):
    a, _ = users
    project = await svc.create_project(a.id, "P")
    undated = await svc.create_task(project.id, "no date")
    future = await svc.create_task(project.id, "later", finish_date=_future())

    for task in (undated, future):
        await svc.authorize_task_mutation(task.id, a.id, action="toggle")
        toggled = await svc.toggle_completion(task.id, True)
        assert toggled.is_completed is True

        updated = await svc.update_task(task.id, title="renamed", description="d")
        assert updated.title == "renamed"
        assert updated.description == "d"

        await svc.authorize_task_mutation(task.id, a.id, action="delete")
        await svc.delete_task(task.id)

    assert await _task_count(db_session, project.id) == 0


@pytest.mark.asyncio
async def test_mutating_missing_task_is_not_found(svc):
    with pytest.raises(NotFoundError):
        await svc.update_task(9999, title="x")
    with pytest.raises(NotFoundError):
        await svc.toggle_completion(9999, True)
    with pytest.raises(NotFoundError):
        await svc.delete_task(9999)
