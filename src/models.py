"""Data models and error types for the task board.

Column keys are "todo", "inprogress" and "done" (no hyphen). These are the
persisted values, so they never change; the terminal renders friendlier
headers on top of them.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional, Tuple

TODO = "todo"
IN_PROGRESS = "inprogress"
DONE = "done"
COLUMNS: Tuple[str, ...] = (TODO, IN_PROGRESS, DONE)


@dataclass(frozen=True)
class Task:
    """A single work item.

    Fields:
        id: Opaque id assigned on creation (``task-<ms>-<suffix>``), never reused.
        text: Trimmed, non-empty description.
        column: One of COLUMNS. Immutable; Board.move_task swaps in a copy.
    """
    id: str
    text: str
    column: str = TODO

    def to_record(self) -> dict:
        return {"id": self.id, "text": self.text, "column": self.column}

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"Task(id={self.id}, text={self.text}, column={self.column})"


@dataclass(frozen=True)
class MoveOutcome:
    """Result of Board.move_task.

    ``moved`` is False for a no-op (task already in the target column).
    ``previous`` is the column the task was in before the call.
    """
    task: Task
    previous: str
    moved: bool

    @property
    def completed(self) -> bool:
        """True only for a transition into done from another column."""
        return self.moved and self.task.column == DONE and self.previous != DONE


@dataclass(frozen=True)
class LoadReport:
    """What startup found in the slot.

    ``unreadable`` means the slot exists but could not be read; ``set_aside``
    is where it was moved so this session's saves cannot overwrite it (None
    when that failed too, and the session then runs without saving).
    """
    loaded: int = 0
    skipped: int = 0
    corrupt: bool = False
    unreadable: bool = False
    set_aside: Optional[str] = None


# -------------------- errors --------------------
class BoardError(Exception):
    """Base class for every error raised by the board core."""


class EmptyInput(BoardError, ValueError):
    def __init__(self, message: str = "Task description cannot be empty."):
        super().__init__(message)


class UnknownColumn(BoardError, ValueError):
    def __init__(self, column: Any):
        self.column = column
        super().__init__(f"Unknown column: {column!r}")


class TaskNotFound(BoardError):
    def __init__(self, task_id: Any):
        self.task_id = task_id
        super().__init__(f"Task {task_id!r} not found.")


class CorruptState(BoardError):
    """Persisted data could not be read back as a list of task records."""


class PersistenceFailure(BoardError):
    """The durable slot could not be written or read.

    ``result`` holds what the triggering command returned; the in-memory
    change it made is kept.
    """

    def __init__(self, message: str, result: Optional[Any] = None):
        super().__init__(message)
        self.result = result
