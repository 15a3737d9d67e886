"""Command-line loop for the task board.

This is the gesture layer: it turns typed commands into board commands and
reacts only to their results. Display numbers shown on screen are resolved
to task ids here; the board only ever sees ids.
"""
import logging
from typing import Callable, List, Optional

import click

from board import Board
from models import (
    DONE, IN_PROGRESS, TODO, MoveOutcome, Task,
    BoardError, EmptyInput, PersistenceFailure, TaskNotFound, UnknownColumn,
)
from render import BoardView

logger = logging.getLogger(__name__)

# --- terminal control helpers ---
# ESC[3J (scrollback), ESC[H (home), ESC[2J (screen), ESC[H (home)
CLEAR_SCREEN = "\033[3J\033[H\033[2J\033[H"
ENTER_ALT_SCREEN = "\033[?1049h"
LEAVE_ALT_SCREEN = "\033[?1049l"

COLUMN_ALIASES = {
    't': TODO,
    'todo': TODO,
    'ip': IN_PROGRESS,
    'inprogress': IN_PROGRESS,
    'in-progress': IN_PROGRESS,
    'd': DONE,
    'done': DONE,
}

EMPTY_HINT = "Task description cannot be empty!"
COMPLETED_MESSAGE = "*** Task completed: {text} ***"

HELP_LINES = [
    "Commands:",
    "  add <text...>       Add a task to TO DO (e.g., add write report)",
    "  mv <n> <column>     Move task number n; columns: t (todo), ip (in progress), d (done)",
    "  rm <n>              Delete task number n",
    "  help                Show this help (press Enter to return)",
    "  exit                Leave (every change is already saved)",
]


class CLI:
    def __init__(self, board: Board, view: BoardView, alt_screen: bool = True,
                 echo: Callable[..., None] = click.echo,
                 read_line: Optional[Callable[[], str]] = None):
        self.board = board
        self.view = view
        self.alt_screen = alt_screen
        self.echo = echo
        self.read_line = read_line or (lambda: input("\n: "))
        self._celebrations: List[str] = []
        board.subscribe_completed(self._on_completed)

    def _on_completed(self, task: Task) -> None:
        self._celebrations.append(COMPLETED_MESSAGE.format(text=task.text))

    def run(self) -> None:
        """Main loop; the board is cleared and redrawn each cycle.

        Hints from the previous command are shown once under the board and
        disappear on the next redraw.
        """
        exit_message: Optional[str] = None
        hint: Optional[str] = None
        if self.alt_screen:
            self.echo(ENTER_ALT_SCREEN, nl=False)
        try:
            while True:
                self._redraw(hint)
                hint = None
                line = self.read_line().strip()
                if not line:
                    continue
                lower = line.lower()
                if lower == 'help':
                    self.echo(CLEAR_SCREEN, nl=False)
                    self.echo('\n'.join(HELP_LINES))
                    self.read_line()
                    continue
                if lower == 'exit':
                    exit_message = "Goodbye."
                    break
                hint = self.handle_command(line)
        except (KeyboardInterrupt, EOFError):
            exit_message = "Interrupted. Goodbye."
        finally:
            if self.alt_screen:
                self.echo(LEAVE_ALT_SCREEN, nl=False)
            if exit_message:
                self.echo(exit_message)

    def _redraw(self, hint: Optional[str]) -> None:
        self.echo(CLEAR_SCREEN, nl=False)
        self.echo("Task Board:")
        self.echo('\n'.join(self.view.render()))
        if hint:
            self.echo("\n" + hint)

    # -------------------- command dispatch --------------------
    def handle_command(self, line: str) -> Optional[str]:
        """Run one command line; return the hint to show, if any."""
        tokens = line.split()
        if not tokens:
            return None
        cmd = tokens[0].lower()
        handlers = {'add': self._cmd_add, 'mv': self._cmd_mv, 'move': self._cmd_mv,
                    'rm': self._cmd_rm, 'remove': self._cmd_rm}
        handler = handlers.get(cmd)
        if handler is None:
            return "Unknown command. Type 'help' for instructions."
        try:
            message = handler(tokens)
        except EmptyInput:
            return EMPTY_HINT
        except TaskNotFound as e:
            # already gone from the user's point of view
            logger.info("ignored command on missing task %s", e.task_id)
            return None
        except UnknownColumn:
            return "Invalid column."
        except PersistenceFailure as e:
            logger.warning("change kept in memory only: %s", e)
            message = self._describe(e.result)
            warning = f"Warning: change may not survive a restart ({e})."
            return '\n'.join(filter(None, [message, warning]))
        except BoardError as e:
            logger.warning("command %r failed: %s", line, e)
            return str(e)
        return message

    def _describe(self, result) -> Optional[str]:
        if self._celebrations:
            messages, self._celebrations = self._celebrations, []
            return '\n'.join(messages)
        if isinstance(result, MoveOutcome) and not result.moved:
            return f'Task already in {result.task.column}.'
        return None

    def _resolve(self, raw: str) -> Optional[str]:
        raw = raw.rstrip('.')
        if not raw.isdigit():
            return None
        return self.view.task_id_for(int(raw))

    # ---- individual command helpers ----
    def _cmd_add(self, tokens: List[str]) -> Optional[str]:
        self.board.add_task(' '.join(tokens[1:]))
        return None

    def _cmd_mv(self, tokens: List[str]) -> Optional[str]:
        if len(tokens) != 3:
            return "Usage: mv <n> <column>; columns: t/ip/d"
        column = COLUMN_ALIASES.get(tokens[2].lower())
        if column is None:
            return "Invalid column."
        task_id = self._resolve(tokens[1])
        if task_id is None:
            return "Invalid task number."
        outcome = self.board.move_task(task_id, column)
        return self._describe(outcome)

    def _cmd_rm(self, tokens: List[str]) -> Optional[str]:
        if len(tokens) != 2:
            return "Usage: rm <n>"
        task_id = self._resolve(tokens[1])
        if task_id is None:
            return "Invalid task number."
        task = self.board.delete_task(task_id)
        return f'Task "{task.text}" removed.'
