# src/trackr/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from collections.abc import Iterable, Iterator, Mapping, Sequence
from pathlib import Path

from ..core.errors import PersistenceFailure
from ..core.live import LiveValue
from .task_models import Tag, TaskDetail, TaskStatus, TaskSummary, User, validate_task_detail

logger = logging.getLogger(__name__)

_SUMMARY_SELECT = """
    SELECT
        t.id, t.title, t.status, t.due_at, t.order_in_category,
        o.id AS owner_id, o.username AS owner_username, o.avatar AS owner_avatar
    FROM tasks AS t
    INNER JOIN users AS o ON o.id = t.owner_id
"""

_DETAIL_SELECT = """
    SELECT
        t.id, t.title, t.description, t.status, t.created_at, t.due_at,
        o.id AS owner_id, o.username AS owner_username, o.avatar AS owner_avatar,
        c.id AS creator_id, c.username AS creator_username, c.avatar AS creator_avatar
    FROM tasks AS t
    INNER JOIN users AS o ON o.id = t.owner_id
    INNER JOIN users AS c ON c.id = t.creator_id
"""


class TaskStore:
    """
    SQLite task store (implements core.ports.TaskRepo).

    The schema is intentionally simple and migration-safe:
    - create tables if missing
    - use PRAGMA table_info to detect missing task columns
    - add columns with ALTER TABLE only when needed

    Every multi-row write runs in a single transaction, so observers never see
    a half-applied reorder. After each successful write the observed summary
    lists are re-queried and republished.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ongoing: LiveValue[list[TaskSummary]] | None = None
        self._archived: LiveValue[list[TaskSummary]] | None = None
        self._ensure_schema()
        logger.info("TaskStore ready db=%s total=%s", self._db_path, self.count_tasks())

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    @contextlib.contextmanager
    def _tx(self, what: str) -> Iterator[sqlite3.Connection]:
        """One transaction: commit on success, roll back and raise PersistenceFailure on error."""
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise PersistenceFailure(f"{what}: cannot open {self._db_path}: {e}") from e
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise PersistenceFailure(f"{what} failed: {e}") from e
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._tx("ensure_schema") as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    username TEXT NOT NULL UNIQUE,
                    avatar TEXT NOT NULL DEFAULT 'default'
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tags (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    label TEXT NOT NULL,
                    color TEXT NOT NULL DEFAULT 'gray'
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    status TEXT NOT NULL DEFAULT 'not_started',
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL,
                    due_at REAL NOT NULL,
                    owner_id INTEGER NOT NULL REFERENCES users(id),
                    creator_id INTEGER NOT NULL REFERENCES users(id),
                    order_in_category INTEGER NOT NULL DEFAULT 0,
                    archived_from TEXT
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS task_tags (
                    task_id INTEGER NOT NULL REFERENCES tasks(id) ON DELETE CASCADE,
                    tag_id INTEGER NOT NULL REFERENCES tags(id) ON DELETE CASCADE,
                    PRIMARY KEY (task_id, tag_id)
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS user_tasks (
                    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    task_id INTEGER NOT NULL REFERENCES tasks(id) ON DELETE CASCADE,
                    PRIMARY KEY (user_id, task_id)
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("description", "TEXT NOT NULL DEFAULT ''")
            add_col("order_in_category", "INTEGER NOT NULL DEFAULT 0")
            add_col("archived_from", "TEXT")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_status_order ON tasks(status, order_in_category)")

    @staticmethod
    def _row_to_user(row: sqlite3.Row, prefix: str = "") -> User:
        return User(
            id=int(row[f"{prefix}id"]),
            username=str(row[f"{prefix}username"]),
            avatar=str(row[f"{prefix}avatar"] or "default"),
        )

    def _load_relations(
        self, conn: sqlite3.Connection, where: str, params: Sequence[object]
    ) -> tuple[dict[int, list[Tag]], dict[int, list[User]]]:
        """Tags and star users for every task matching `where` (a clause over tasks)."""
        tags: dict[int, list[Tag]] = {}
        cur = conn.execute(
            f"""
            SELECT tt.task_id, g.id, g.label, g.color
            FROM task_tags AS tt
            INNER JOIN tags AS g ON g.id = tt.tag_id
            WHERE tt.task_id IN (SELECT id FROM tasks WHERE {where})
            ORDER BY g.id
            """,
            params,
        )
        for row in cur.fetchall():
            tags.setdefault(int(row["task_id"]), []).append(
                Tag(id=int(row["id"]), label=str(row["label"]), color=str(row["color"]))
            )

        stars: dict[int, list[User]] = {}
        cur = conn.execute(
            f"""
            SELECT ut.task_id, u.id, u.username, u.avatar
            FROM user_tasks AS ut
            INNER JOIN users AS u ON u.id = ut.user_id
            WHERE ut.task_id IN (SELECT id FROM tasks WHERE {where})
            ORDER BY u.id
            """,
            params,
        )
        for row in cur.fetchall():
            stars.setdefault(int(row["task_id"]), []).append(self._row_to_user(row))
        return tags, stars

    def _query_summaries(self, where: str, params: Sequence[object]) -> list[TaskSummary]:
        with self._tx("query_summaries") as conn:
            rows = conn.execute(f"{_SUMMARY_SELECT} WHERE {where} ORDER BY t.id", params).fetchall()
            tags, stars = self._load_relations(conn, where, params)
        return [
            TaskSummary(
                id=int(r["id"]),
                title=str(r["title"]),
                status=TaskStatus.from_db(r["status"]),
                due_at=float(r["due_at"]),
                order_in_category=int(r["order_in_category"]),
                owner=self._row_to_user(r, "owner_"),
                tags=tuple(tags.get(int(r["id"]), ())),
                star_users=tuple(stars.get(int(r["id"]), ())),
            )
            for r in rows
        ]

    def _load_ongoing(self) -> list[TaskSummary]:
        return self._query_summaries("status != ?", (TaskStatus.ARCHIVED.value,))

    def _load_archived(self) -> list[TaskSummary]:
        return self._query_summaries("status = ?", (TaskStatus.ARCHIVED.value,))

    def _notify(self) -> None:
        if self._ongoing is not None:
            self._ongoing.set(self._load_ongoing())
        if self._archived is not None:
            self._archived.set(self._load_archived())

    # ---- live queries ----

    def observe_ongoing_summaries(self) -> LiveValue[list[TaskSummary]]:
        """Summaries of every non-archived task, republished after each write."""
        if self._ongoing is None:
            self._ongoing = LiveValue(self._load_ongoing(), name="ongoing_summaries")
        return self._ongoing

    def observe_archived_summaries(self) -> LiveValue[list[TaskSummary]]:
        if self._archived is None:
            self._archived = LiveValue(self._load_archived(), name="archived_summaries")
        return self._archived

    # ---- users / tags ----

    def add_user(self, username: str, avatar: str = "default") -> User:
        if not username or not username.strip():
            raise ValueError("username is required")
        with self._tx("add_user") as conn:
            cur = conn.execute(
                "INSERT INTO users(username, avatar) VALUES (?, ?)", (username.strip(), avatar)
            )
            user_id = int(cur.lastrowid or 0)
        logger.debug("User added id=%s username=%s", user_id, username)
        return User(id=user_id, username=username.strip(), avatar=avatar)

    def ensure_user(self, username: str, avatar: str = "default") -> User:
        """Return the user with this name, creating it when missing."""
        with self._tx("ensure_user") as conn:
            row = conn.execute(
                "SELECT id, username, avatar FROM users WHERE username = ?", (username.strip(),)
            ).fetchone()
        if row is not None:
            return self._row_to_user(row)
        return self.add_user(username, avatar)

    def load_users(self) -> list[User]:
        with self._tx("load_users") as conn:
            rows = conn.execute("SELECT id, username, avatar FROM users ORDER BY id").fetchall()
        return [self._row_to_user(r) for r in rows]

    def add_tag(self, label: str, color: str = "gray") -> Tag:
        with self._tx("add_tag") as conn:
            cur = conn.execute("INSERT INTO tags(label, color) VALUES (?, ?)", (label, color))
            tag_id = int(cur.lastrowid or 0)
        return Tag(id=tag_id, label=label, color=color)

    def load_tags(self) -> list[Tag]:
        with self._tx("load_tags") as conn:
            rows = conn.execute("SELECT id, label, color FROM tags ORDER BY id").fetchall()
        return [Tag(id=int(r["id"]), label=str(r["label"]), color=str(r["color"])) for r in rows]

    # ---- tasks ----

    def count_tasks(self) -> int:
        with self._tx("count_tasks") as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
        return int(n)

    def load_task_detail(self, task_id: int) -> TaskDetail | None:
        where = "id = ?"
        params = (int(task_id),)
        with self._tx("load_task_detail") as conn:
            row = conn.execute(f"{_DETAIL_SELECT} WHERE t.id = ?", params).fetchone()
            if row is None:
                return None
            tags, stars = self._load_relations(conn, where, params)
        return TaskDetail(
            id=int(row["id"]),
            title=str(row["title"]),
            description=str(row["description"] or ""),
            status=TaskStatus.from_db(row["status"]),
            created_at=float(row["created_at"]),
            due_at=float(row["due_at"]),
            owner=self._row_to_user(row, "owner_"),
            creator=self._row_to_user(row, "creator_"),
            tags=tuple(tags.get(int(row["id"]), ())),
            star_users=tuple(stars.get(int(row["id"]), ())),
        )

    def save_task_detail(self, detail: TaskDetail) -> int:
        """
        Insert (id == 0) or update a task and sync its tags.

        Raises InvalidArgument for an empty title before touching the database.
        New tasks go to the end of their status group.
        """
        validate_task_detail(detail)

        now = time.time()
        with self._tx("save_task_detail") as conn:
            if detail.id:
                conn.execute(
                    """
                    UPDATE tasks
                    SET title = ?, description = ?, status = ?, due_at = ?,
                        owner_id = ?, creator_id = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (
                        detail.title.strip(),
                        detail.description,
                        detail.status.value,
                        float(detail.due_at),
                        detail.owner.id,
                        detail.creator.id,
                        now,
                        int(detail.id),
                    ),
                )
                task_id = int(detail.id)
            else:
                (next_order,) = conn.execute(
                    "SELECT COALESCE(MAX(order_in_category) + 1, 0) FROM tasks WHERE status = ?",
                    (detail.status.value,),
                ).fetchone()
                cur = conn.execute(
                    """
                    INSERT INTO tasks(
                        title, description, status, created_at, updated_at, due_at,
                        owner_id, creator_id, order_in_category
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        detail.title.strip(),
                        detail.description,
                        detail.status.value,
                        float(detail.created_at or now),
                        now,
                        float(detail.due_at),
                        detail.owner.id,
                        detail.creator.id,
                        int(next_order),
                    ),
                )
                if cur.lastrowid is None:
                    raise PersistenceFailure("SQLite did not return lastrowid for tasks insert")
                task_id = int(cur.lastrowid)

            updated_tag_ids = [t.id for t in detail.tags]
            current_tag_ids = [
                int(r["tag_id"])
                for r in conn.execute("SELECT tag_id FROM task_tags WHERE task_id = ?", (task_id,))
            ]
            removed = [(task_id, i) for i in current_tag_ids if i not in updated_tag_ids]
            added = [(task_id, i) for i in updated_tag_ids if i not in current_tag_ids]
            conn.executemany("DELETE FROM task_tags WHERE task_id = ? AND tag_id = ?", removed)
            conn.executemany("INSERT INTO task_tags(task_id, tag_id) VALUES (?, ?)", added)

        logger.debug("Task saved id=%s status=%s", task_id, detail.status.value)
        self._notify()
        return task_id

    def update_task_status(self, task_id: int, status: TaskStatus) -> None:
        self.update_tasks_status([task_id], status)

    def update_tasks_status(self, task_ids: Iterable[int], status: TaskStatus) -> None:
        """
        Set the status of every given task in one transaction.

        Moving into ARCHIVED remembers the previous status in archived_from;
        moving anywhere else clears it.
        """
        ids = [int(i) for i in task_ids]
        if not ids:
            return
        placeholders = ",".join("?" for _ in ids)
        archived = TaskStatus.ARCHIVED.value
        with self._tx("update_tasks_status") as conn:
            conn.execute(
                f"""
                UPDATE tasks
                SET archived_from = CASE
                        WHEN ? != '{archived}' THEN NULL
                        WHEN status = '{archived}' THEN archived_from
                        ELSE status
                    END,
                    status = ?,
                    updated_at = ?
                WHERE id IN ({placeholders})
                """,
                (status.value, status.value, time.time(), *ids),
            )
        logger.debug("Status -> %s for tasks %s", status.value, ids)
        self._notify()

    def archive(self, task_ids: Iterable[int]) -> None:
        self.update_tasks_status(task_ids, TaskStatus.ARCHIVED)

    def unarchive(self, task_ids: Iterable[int]) -> None:
        """Move archived tasks back to the status they had before archiving."""
        ids = [int(i) for i in task_ids]
        if not ids:
            return
        placeholders = ",".join("?" for _ in ids)
        with self._tx("unarchive") as conn:
            conn.execute(
                f"""
                UPDATE tasks
                SET status = COALESCE(archived_from, ?),
                    archived_from = NULL,
                    updated_at = ?
                WHERE id IN ({placeholders})
                  AND status = ?
                """,
                (TaskStatus.NOT_STARTED.value, time.time(), *ids, TaskStatus.ARCHIVED.value),
            )
        logger.debug("Unarchived tasks %s", ids)
        self._notify()

    def update_order_in_category(self, task_id: int, order_in_category: int) -> None:
        self.update_orders({task_id: order_in_category})

    def update_orders(self, orders: Mapping[int, int]) -> None:
        """Apply every (task_id -> order_in_category) pair in one transaction."""
        if not orders:
            return
        now = time.time()
        with self._tx("update_orders") as conn:
            conn.executemany(
                "UPDATE tasks SET order_in_category = ?, updated_at = ? WHERE id = ?",
                [(int(order), now, int(task_id)) for task_id, order in orders.items()],
            )
        self._notify()

    def reorder_list(self, status: TaskStatus, summaries: Sequence[TaskSummary]) -> None:
        """
        Persist the given order for one status group: order_in_category = position.

        Summaries of other statuses are skipped (they do not take a position).
        """
        in_group = [s for s in summaries if s.status == status]
        self.update_orders({s.id: index for index, s in enumerate(in_group)})

    def toggle_task_star_state(self, task_id: int, user_id: int) -> None:
        with self._tx("toggle_task_star_state") as conn:
            row = conn.execute(
                "SELECT 1 FROM user_tasks WHERE task_id = ? AND user_id = ?", (int(task_id), int(user_id))
            ).fetchone()
            if row is None:
                conn.execute(
                    "INSERT INTO user_tasks(user_id, task_id) VALUES (?, ?)", (int(user_id), int(task_id))
                )
            else:
                conn.execute(
                    "DELETE FROM user_tasks WHERE task_id = ? AND user_id = ?", (int(task_id), int(user_id))
                )
        self._notify()
