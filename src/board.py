"""Board store: the authoritative set of tasks and the commands that change it.

Column keys: "todo", "inprogress", "done". Membership is derived from each
task's ``column`` field, so a task can never sit in two columns at once.
Every command validates before it mutates; a successful mutation is then
snapshotted through the attached storage (if any) before the call returns.
"""
import dataclasses
import logging
import random
import string
import time
from typing import Any, Callable, Dict, List, Mapping, Optional

from models import (
    COLUMNS, TODO, Task, MoveOutcome, LoadReport,
    EmptyInput, UnknownColumn, TaskNotFound, PersistenceFailure,
)

logger = logging.getLogger(__name__)

ID_PREFIX = "task-"
_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_SUFFIX_LEN = 9

CompletedCallback = Callable[[Task], None]


def generate_id() -> str:
    """Return ``task-<epoch ms>-<9 base36 chars>``."""
    suffix = ''.join(random.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LEN))
    return f"{ID_PREFIX}{int(time.time() * 1000)}-{suffix}"


class Board:
    def __init__(self, storage=None, id_factory: Callable[[], str] = generate_id):
        # insertion order doubles as append order within a column
        self._tasks: Dict[str, Task] = {}
        self._storage = storage
        self._id_factory = id_factory
        self._completed_subscribers: List[CompletedCallback] = []

    # -------------------- signal --------------------
    def subscribe_completed(self, callback: CompletedCallback) -> None:
        """Register a callback fired when a task moves into done from elsewhere."""
        self._completed_subscribers.append(callback)

    def _emit_completed(self, task: Task) -> None:
        for callback in self._completed_subscribers:
            try:
                callback(task)
            except Exception:
                logger.exception("completed callback failed for %s", task.id)

    # -------------------- queries --------------------
    def list_by_column(self, column: str) -> List[Task]:
        return [t for t in self._tasks.values() if t.column == column]

    def all_tasks(self) -> List[Task]:
        """Every task, column by column, each column in append order."""
        return [t for column in COLUMNS for t in self.list_by_column(column)]

    def get(self, task_id: str) -> Optional[Task]:
        return self._tasks.get(task_id)

    def snapshot(self) -> List[Dict[str, str]]:
        return [t.to_record() for t in self.all_tasks()]

    def __len__(self) -> int:
        return len(self._tasks)

    # -------------------- commands --------------------
    def add_task(self, text: str) -> Task:
        """Create a task in todo from ``text`` (trimmed). Raises EmptyInput if blank."""
        cleaned = text.strip() if isinstance(text, str) else ''
        if not cleaned:
            raise EmptyInput()
        task = Task(id=self._allocate_id(), text=cleaned, column=TODO)
        self._tasks[task.id] = task
        logger.info("added %s to %s", task.id, TODO)
        self._persist(task)
        return task

    def move_task(self, task_id: str, column: str) -> MoveOutcome:
        """Move a task to ``column``.

        Returns a MoveOutcome; ``moved`` is False when the task is already
        there, in which case nothing is changed or saved. A move into done
        from another column fires the completed signal.
        """
        if column not in COLUMNS:
            raise UnknownColumn(column)
        task = self._tasks.get(task_id)
        if task is None:
            logger.warning("move: task %s not found", task_id)
            raise TaskNotFound(task_id)
        previous = task.column
        if previous == column:
            return MoveOutcome(task=task, previous=previous, moved=False)
        # re-insert so the task lands at the end of its new column
        del self._tasks[task_id]
        task = dataclasses.replace(task, column=column)
        self._tasks[task_id] = task
        outcome = MoveOutcome(task=task, previous=previous, moved=True)
        logger.info("moved %s from %s to %s", task_id, previous, column)
        if outcome.completed:
            self._emit_completed(task)
        self._persist(outcome)
        return outcome

    def delete_task(self, task_id: str) -> Task:
        """Remove a task and return it (its ``column`` tells where it was)."""
        task = self._tasks.pop(task_id, None)
        if task is None:
            logger.warning("delete: task %s not found", task_id)
            raise TaskNotFound(task_id)
        logger.info("deleted %s from %s", task_id, task.column)
        self._persist(task)
        return task

    # -------------------- loading --------------------
    def load_snapshot(self, records: Any) -> LoadReport:
        """Replace the board contents with ``records``.

        Never raises. A value that is not a list of records leaves the board
        empty and reports ``corrupt``; individual bad records are skipped.
        Loading does not write a snapshot back.
        """
        self._tasks.clear()
        if not isinstance(records, (list, tuple)):
            logger.error("snapshot is not a list of records (%s); starting empty",
                         type(records).__name__)
            return LoadReport(corrupt=True)
        skipped = 0
        for raw in records:
            task = self._task_from_record(raw)
            if task is None:
                logger.warning("skipping malformed task record: %r", raw)
                skipped += 1
                continue
            self._tasks[task.id] = task
        logger.info("loaded %d tasks (%d skipped)", len(self._tasks), skipped)
        return LoadReport(loaded=len(self._tasks), skipped=skipped)

    def _task_from_record(self, raw: Any) -> Optional[Task]:
        if not isinstance(raw, Mapping):
            return None
        tid = raw.get('id')
        text = raw.get('text')
        # records written before the "column" key carried it under "status"
        column = raw.get('column', raw.get('status'))
        if not isinstance(tid, str) or not tid.strip():
            return None
        if not isinstance(text, str) or not text.strip():
            return None
        if column not in COLUMNS:
            return None
        if tid in self._tasks:
            return None
        return Task(id=tid, text=text, column=column)

    # -------------------- internals --------------------
    def _allocate_id(self) -> str:
        tid = self._id_factory()
        while tid in self._tasks:
            tid = self._id_factory()
        return tid

    def _persist(self, result: Any) -> None:
        if self._storage is None:
            return
        try:
            self._storage.save(self.snapshot())
        except PersistenceFailure as exc:
            exc.result = result
            raise
