# tests/test_tasks_view.py

from __future__ import annotations

import pytest

from trackr.core.scope import Scope
from trackr.tasks.task_api import create_task
from trackr.tasks.task_models import TaskStatus, User
from trackr.tasks.task_store import TaskStore
from trackr.views.list_items import HeaderItem, task_summaries
from trackr.views.tasks_view import TasksViewModel

from .fakes import FakeTaskRepo, make_summary


def _headers(items):
    return [(i.header_data.task_status, i.header_data.count, i.header_data.expanded) for i in items if isinstance(i, HeaderItem)]


@pytest.mark.asyncio
async def test_list_items_published_on_creation() -> None:
    repo = FakeTaskRepo([make_summary(1, TaskStatus.IN_PROGRESS), make_summary(2, TaskStatus.COMPLETED)])
    vm = TasksViewModel(repo, Scope("test"), current_user_id=1)

    items = vm.list_items.value
    assert items is not None
    assert _headers(items) == [
        (TaskStatus.IN_PROGRESS, 1, True),
        (TaskStatus.NOT_STARTED, 0, True),
        (TaskStatus.COMPLETED, 1, True),
    ]


@pytest.mark.asyncio
async def test_toggle_reprojects_from_cached_summaries() -> None:
    repo = FakeTaskRepo([make_summary(1, TaskStatus.IN_PROGRESS), make_summary(2, TaskStatus.IN_PROGRESS, 1)])
    vm = TasksViewModel(repo, Scope("test"), current_user_id=1)
    published = []
    vm.list_items.subscribe(published.append)

    vm.toggle_expanded_state(TaskStatus.IN_PROGRESS)

    assert repo.calls == []
    assert len(published) == 2
    assert task_summaries(published[-1]) == []
    assert _headers(published[-1])[0] == (TaskStatus.IN_PROGRESS, 2, False)

    header = published[-1][0].header_data
    vm.toggle_expanded_state(header)
    assert [s.id for s in task_summaries(vm.list_items.value or [])] == [1, 2]


@pytest.mark.asyncio
async def test_star_archive_and_undo_against_sqlite(store: TaskStore, user: User) -> None:
    a = create_task(store, title="a", owner=user, status=TaskStatus.IN_PROGRESS)
    b = create_task(store, title="b", owner=user, status=TaskStatus.IN_PROGRESS)
    scope = Scope("test")
    vm = TasksViewModel(store, scope, current_user_id=user.id)

    summary_a = vm.find_task(a)
    assert summary_a is not None
    vm.toggle_task_star_state(summary_a)
    await scope.join()
    starred = vm.find_task(a)
    assert starred is not None and starred.is_starred_by(user.id)

    vm.archive_task(starred)
    await scope.join()
    assert [s.id for s in task_summaries(vm.list_items.value or [])] == [b]
    assert _headers(vm.list_items.value or [])[0] == (TaskStatus.IN_PROGRESS, 1, True)

    vm.undo_archive()
    await scope.join()
    assert [s.id for s in task_summaries(vm.list_items.value or [])] == [a, b]
    vm.close()


@pytest.mark.asyncio
async def test_drag_then_undo_against_sqlite(store: TaskStore, user: User) -> None:
    ids = [create_task(store, title=f"t{i}", owner=user, status=TaskStatus.NOT_STARTED) for i in range(4)]
    scope = Scope("test")
    vm = TasksViewModel(store, scope, current_user_id=user.id)

    def shown() -> list[int]:
        return [s.id for s in task_summaries(vm.list_items.value or [])]

    vm.begin_drag(TaskStatus.NOT_STARTED)
    group = vm.reorder.current_order(TaskStatus.NOT_STARTED)
    vm.commit_drag(TaskStatus.NOT_STARTED, [group[3], *group[:3]])
    await scope.join()
    assert shown() == [ids[3], ids[0], ids[1], ids[2]]

    vm.undo_last_reorder()
    await scope.join()
    assert shown() == ids

    vm.move_task(TaskStatus.NOT_STARTED, 0, 3)
    await scope.join()
    assert shown() == [ids[1], ids[2], ids[3], ids[0]]


@pytest.mark.asyncio
async def test_cancelled_scope_leaves_storage_untouched(store: TaskStore, user: User) -> None:
    task_id = create_task(store, title="a", owner=user, status=TaskStatus.IN_PROGRESS)
    scope = Scope("test")
    vm = TasksViewModel(store, scope, current_user_id=user.id)

    summary = vm.find_task(task_id)
    assert summary is not None
    vm.archive_task(summary)
    scope.cancel()
    await scope.join()

    detail = store.load_task_detail(task_id)
    assert detail is not None
    assert detail.status == TaskStatus.IN_PROGRESS
