# tests/test_task_store.py

from __future__ import annotations

import sqlite3
import time
from pathlib import Path

import pytest

from trackr.core.errors import InvalidArgument, PersistenceFailure
from trackr.tasks.task_api import create_task, seed_demo_data
from trackr.tasks.task_models import TaskDetail, TaskStatus, User
from trackr.tasks.task_store import TaskStore


def _orders(store: TaskStore, status: TaskStatus) -> dict[int, int]:
    live = store.observe_ongoing_summaries().value or []
    return {s.id: s.order_in_category for s in live if s.status == status}


def test_new_tasks_go_to_end_of_their_group(store: TaskStore, user: User) -> None:
    a = create_task(store, title="a", owner=user, status=TaskStatus.IN_PROGRESS)
    b = create_task(store, title="b", owner=user, status=TaskStatus.IN_PROGRESS)
    c = create_task(store, title="c", owner=user, status=TaskStatus.NOT_STARTED)

    assert _orders(store, TaskStatus.IN_PROGRESS) == {a: 0, b: 1}
    assert _orders(store, TaskStatus.NOT_STARTED) == {c: 0}
    assert store.count_tasks() == 3


def test_empty_title_is_rejected_before_any_write(store: TaskStore, user: User) -> None:
    seen: list[object] = []
    store.observe_ongoing_summaries().subscribe(seen.append)
    now = time.time()
    detail = TaskDetail(
        id=0, title="   ", status=TaskStatus.NOT_STARTED, created_at=now, due_at=now, owner=user, creator=user
    )

    with pytest.raises(InvalidArgument):
        store.save_task_detail(detail)

    assert store.count_tasks() == 0
    assert len(seen) == 1


def test_save_and_load_detail_syncs_tags(store: TaskStore, user: User) -> None:
    work = store.add_tag("work", "blue")
    home = store.add_tag("home", "green")
    task_id = create_task(store, title="Write brief", owner=user, description="two pages", tags=[work])

    detail = store.load_task_detail(task_id)
    assert detail is not None
    assert detail.title == "Write brief"
    assert detail.description == "two pages"
    assert detail.creator == user
    assert [t.label for t in detail.tags] == ["work"]

    updated = TaskDetail(
        id=task_id,
        title="Write the brief",
        description=detail.description,
        status=TaskStatus.IN_PROGRESS,
        created_at=detail.created_at,
        due_at=detail.due_at,
        owner=user,
        creator=user,
        tags=(home,),
    )
    assert store.save_task_detail(updated) == task_id

    again = store.load_task_detail(task_id)
    assert again is not None
    assert again.title == "Write the brief"
    assert again.status == TaskStatus.IN_PROGRESS
    assert [t.label for t in again.tags] == ["home"]
    assert store.load_task_detail(9999) is None


def test_reorder_list_assigns_positions_and_skips_other_statuses(store: TaskStore, user: User) -> None:
    ids = [create_task(store, title=f"t{i}", owner=user, status=TaskStatus.IN_PROGRESS) for i in range(3)]
    other = create_task(store, title="other", owner=user, status=TaskStatus.COMPLETED)
    by_id = {s.id: s for s in store.observe_ongoing_summaries().value or []}

    store.reorder_list(TaskStatus.IN_PROGRESS, [by_id[ids[2]], by_id[other], by_id[ids[0]], by_id[ids[1]]])

    assert _orders(store, TaskStatus.IN_PROGRESS) == {ids[2]: 0, ids[0]: 1, ids[1]: 2}
    assert _orders(store, TaskStatus.COMPLETED) == {other: 0}


def test_update_orders_is_all_or_nothing(store: TaskStore, user: User, tmp_path: Path) -> None:
    a = create_task(store, title="a", owner=user)
    b = create_task(store, title="b", owner=user)

    # A trigger that rejects one of the rows makes the whole batch fail.
    conn = sqlite3.connect(str(tmp_path / "tasks.sqlite3"))
    conn.execute(
        f"""
        CREATE TRIGGER reject_b BEFORE UPDATE OF order_in_category ON tasks
        WHEN NEW.id = {b}
        BEGIN SELECT RAISE(ABORT, 'rejected'); END
        """
    )
    conn.commit()
    conn.close()

    with pytest.raises(PersistenceFailure):
        store.update_orders({a: 5, b: 6})

    assert _orders(store, TaskStatus.NOT_STARTED) == {a: 0, b: 1}


def test_archive_and_unarchive_remember_previous_status(store: TaskStore, user: User) -> None:
    doing = create_task(store, title="doing", owner=user, status=TaskStatus.IN_PROGRESS)
    done = create_task(store, title="done", owner=user, status=TaskStatus.COMPLETED)
    archived = store.observe_archived_summaries()

    store.archive([doing, done])
    assert {s.id for s in archived.value or []} == {doing, done}
    assert store.observe_ongoing_summaries().value == []

    # Archiving twice keeps the original status.
    store.archive([doing])
    store.unarchive([doing, done])

    statuses = {s.id: s.status for s in store.observe_ongoing_summaries().value or []}
    assert statuses == {doing: TaskStatus.IN_PROGRESS, done: TaskStatus.COMPLETED}
    assert archived.value == []


def test_unarchive_without_known_status_goes_to_not_started(store: TaskStore, user: User) -> None:
    task_id = create_task(store, title="x", owner=user, status=TaskStatus.ARCHIVED)
    store.unarchive([task_id])
    (summary,) = store.observe_ongoing_summaries().value or []
    assert summary.status == TaskStatus.NOT_STARTED


def test_toggle_star_twice_restores_star_set(store: TaskStore, user: User) -> None:
    bob = store.add_user("bob")
    task_id = create_task(store, title="x", owner=user)
    live = store.observe_ongoing_summaries()

    store.toggle_task_star_state(task_id, bob.id)
    (summary,) = live.value or []
    assert summary.star_users == (bob,)
    assert summary.is_starred_by(bob.id)

    store.toggle_task_star_state(task_id, bob.id)
    (summary,) = live.value or []
    assert summary.star_users == ()


def test_summaries_carry_owner_and_tags(store: TaskStore, user: User) -> None:
    urgent = store.add_tag("urgent", "red")
    create_task(store, title="x", owner=user, tags=[urgent])
    (summary,) = store.observe_ongoing_summaries().value or []
    assert summary.owner == user
    assert summary.tags == (urgent,)


def test_ensure_user_is_idempotent(store: TaskStore) -> None:
    first = store.ensure_user("carol")
    second = store.ensure_user("carol")
    assert first == second
    assert [u.username for u in store.load_users()] == ["carol"]


def test_schema_survives_reopen(store: TaskStore, user: User, tmp_path: Path) -> None:
    create_task(store, title="persisted", owner=user)
    reopened = TaskStore(tmp_path / "tasks.sqlite3")
    assert reopened.count_tasks() == 1


def test_seed_demo_data_only_fills_empty_db(store: TaskStore, user: User) -> None:
    created = seed_demo_data(store, user)
    assert created > 0
    assert store.count_tasks() == created
    assert store.observe_archived_summaries().value
    assert seed_demo_data(store, user) == 0
