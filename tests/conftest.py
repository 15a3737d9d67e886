"""Shared fixtures for the task board tests."""

import sys
from pathlib import Path

import pytest

# Modules live flat under src/
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from board import Board  # noqa: E402
from storage import Storage  # noqa: E402


@pytest.fixture
def storage(tmp_path):
    return Storage(tmp_path)


@pytest.fixture
def board(storage):
    return Board(storage=storage)


@pytest.fixture
def counter_ids():
    """Deterministic id factory: task-1, task-2, ..."""
    state = {"n": 0}

    def factory():
        state["n"] += 1
        return f"task-{state['n']}"

    return factory
