"""Persistence for the task board: one JSON slot holding the full task list.

The slot key is "kanbanTasks"; on disk it is ``<data dir>/kanbanTasks.json``.
Every save overwrites the whole slot with the current snapshot. A missing
file means "no tasks yet"; a file that does not parse as a list of records
is corrupt and gets removed so it cannot keep failing.
"""
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from models import CorruptState, PersistenceFailure

logger = logging.getLogger(__name__)

SLOT_KEY = 'kanbanTasks'

TaskRecord = Dict[str, Any]


class Storage:
    def __init__(self, data_dir: Union[str, Path], key: str = SLOT_KEY):
        self.path = Path(data_dir).expanduser() / f'{key}.json'

    def save(self, records: List[TaskRecord]) -> None:
        """Overwrite the slot with ``records`` (pretty-printed JSON).

        The snapshot goes to a temp file next to the slot and is then renamed
        over it, so a failed write leaves the previous snapshot in place.
        """
        tmp_name = None
        try:
            payload = json.dumps(records, indent=4)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile('w', encoding='utf-8', dir=self.path.parent,
                                             prefix=f'.{self.path.name}.', suffix='.tmp',
                                             delete=False) as f:
                tmp_name = f.name
                f.write(payload)
            os.replace(tmp_name, self.path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            logger.warning("could not save tasks to %s: %s", self.path, e)
            raise PersistenceFailure(f"Could not save tasks to {self.path}: {e}") from e
        logger.info("saved %d tasks to %s", len(records), self.path)

    def load(self) -> Optional[List[TaskRecord]]:
        """Read the slot.

        Returns None when nothing has been stored yet, otherwise the list of
        records. Raises CorruptState (after clearing the slot) when the content
        is not a JSON list of objects, and PersistenceFailure when the file
        exists but cannot be read.
        """
        if not self.path.exists():
            logger.info("no saved tasks at %s", self.path)
            return None
        try:
            raw = self.path.read_bytes()
        except OSError as e:
            raise PersistenceFailure(f"Could not read tasks from {self.path}: {e}") from e
        try:
            data = json.loads(raw.decode('utf-8'))
        except ValueError as e:
            self._discard(f"unparseable JSON ({e})")
            raise CorruptState(f"{self.path} is not valid JSON; cleared") from e
        if not _is_record_list(data):
            self._discard(f"expected a list of objects, got {type(data).__name__}")
            raise CorruptState(f"{self.path} does not hold a list of task records; cleared")
        return data

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceFailure(f"Could not clear {self.path}: {e}") from e

    def set_aside(self) -> Path:
        """Rename an unreadable slot out of the way; return where it went."""
        target = self.path.with_name(f'{self.path.name}.unreadable-{time.strftime("%Y%m%d-%H%M%S")}')
        try:
            self.path.rename(target)
        except OSError as e:
            raise PersistenceFailure(f"Could not move {self.path} aside: {e}") from e
        logger.warning("moved unreadable %s to %s", self.path, target)
        return target

    def _discard(self, reason: str) -> None:
        logger.error("saved tasks at %s are corrupt: %s; clearing", self.path, reason)
        self.clear()


def _is_record_list(data: Any) -> bool:
    return isinstance(data, list) and all(isinstance(item, dict) for item in data)
