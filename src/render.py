"""Terminal projection of the board: three side-by-side, word-wrapped columns.

The view only reads the board. Tasks get display numbers (1..n, column by
column) on every render; the CLI resolves those numbers back to task ids
through ``task_id_for`` so the board itself never sees them.
"""
import re
import shutil
from typing import Dict, List, Mapping, Optional

from board import Board
from models import COLUMNS, DONE, Task
from theme import Theme

HEADER_TITLES: Dict[str, str] = {"todo": "TO DO", "inprogress": "IN PROGRESS", "done": "DONE"}
DONE_MARK = "✓ "
MIN_COL_WIDTH = 18
SEP = " | "
ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def visible_len(s: str) -> int:
    return len(ANSI_RE.sub('', s))


class BoardView:
    def __init__(self, board: Board, theme: Theme):
        self.board = board
        self.theme = theme
        self._numbers: Dict[int, str] = {}

    # -------------------- display numbers --------------------
    def _number_tasks(self) -> Dict[str, List[tuple]]:
        self._numbers = {}
        numbered: Dict[str, List[tuple]] = {}
        n = 1
        for column in COLUMNS:
            numbered[column] = []
            for task in self.board.list_by_column(column):
                self._numbers[n] = task.id
                numbered[column].append((n, task))
                n += 1
        return numbered

    def task_id_for(self, number: int) -> Optional[str]:
        """Task id shown as ``number`` in the last render, if any."""
        return self._numbers.get(number)

    # -------------------- rendering --------------------
    def render(self, term_width: Optional[int] = None) -> List[str]:
        if term_width is None:
            term_width = shutil.get_terminal_size((120, 30)).columns
        numbered = self._number_tasks()
        widths = self._compute_column_widths(numbered, term_width)
        wrapped = {c: self._wrap_column(numbered[c], widths[c]) for c in COLUMNS}
        return self._layout(widths, wrapped)

    def _label(self, n: int, task: Task) -> tuple:
        prefix = f"{n}. "
        text = (DONE_MARK + task.text) if task.column == DONE else task.text
        return prefix, text

    def _compute_column_widths(self, numbered: Mapping[str, List[tuple]], term_width: int) -> Dict[str, int]:
        sep_total = len(SEP) * (len(COLUMNS) - 1)
        widths: Dict[str, int] = {}
        for column in COLUMNS:
            longest = len(HEADER_TITLES[column])
            for n, task in numbered[column]:
                prefix, text = self._label(n, task)
                longest = max(longest, len(prefix) + len(text))
            widths[column] = max(MIN_COL_WIDTH, longest)
        if sum(widths.values()) + sep_total > term_width:
            target_space = max(term_width - sep_total, len(COLUMNS) * MIN_COL_WIDTH)
            while sum(widths.values()) > target_space:
                widest = max(COLUMNS, key=lambda c: widths[c])
                if widths[widest] <= MIN_COL_WIDTH:
                    break
                widths[widest] -= 1
        else:
            extra = term_width - (sum(widths.values()) + sep_total)
            i = 0
            while extra > 0:
                widths[COLUMNS[i % len(COLUMNS)]] += 1
                extra -= 1
                i += 1
        return widths

    def _wrap_column(self, entries: List[tuple], width: int) -> List[str]:
        if not entries:
            return [self.theme.color('(empty)', self.theme.empty)]
        lines: List[str] = []
        for n, task in entries:
            lines.extend(self._wrap_task(n, task, width))
        return lines

    def _wrap_task(self, n: int, task: Task, width: int) -> List[str]:
        prefix, text = self._label(n, task)
        limit = max(1, width - len(prefix))
        raw_lines: List[str] = []
        current = ''
        for word in text.split():
            # hard-split words longer than the column
            while len(word) > limit:
                if current:
                    raw_lines.append(current)
                    current = ''
                raw_lines.append(word[:limit])
                word = word[limit:]
            candidate = word if not current else current + ' ' + word
            if len(candidate) <= limit:
                current = candidate
            else:
                raw_lines.append(current)
                current = word
        if current:
            raw_lines.append(current)
        accent = self.theme.columns[task.column]
        first = self.theme.color(prefix.rstrip(), self.theme.task_id) + ' '
        indent = ' ' * len(prefix)
        return [(first if i == 0 else indent) + self.theme.color(line, accent)
                for i, line in enumerate(raw_lines)]

    def _layout(self, widths: Mapping[str, int], wrapped: Mapping[str, List[str]]) -> List[str]:
        def pad(cell: str, width: int) -> str:
            return cell + ' ' * max(0, width - visible_len(cell))

        header = SEP.join(pad(self.theme.color(HEADER_TITLES[c], self.theme.header, self.theme.bold), widths[c])
                          for c in COLUMNS)
        rule = SEP.join(self.theme.color('-' * widths[c], self.theme.header) for c in COLUMNS)
        out = [header, rule]
        rows = max(len(wrapped[c]) for c in COLUMNS)
        for r in range(rows):
            cells = [pad(wrapped[c][r], widths[c]) if r < len(wrapped[c]) else ' ' * widths[c]
                     for c in COLUMNS]
            out.append(SEP.join(cells))
        return out
