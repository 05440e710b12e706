"""
Undo journal for all-or-nothing pool operations.

Each mutating step records its inverse. If a later step fails, the recorded
inverses run newest-first, leaving the ledgers exactly as they were before
the operation started.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Tuple

from ..errors import RollbackError

logger = logging.getLogger(__name__)

UndoFn = Callable[[], None]


class Journal:
    def __init__(self) -> None:
        self._undo: List[Tuple[str, UndoFn]] = []

    def record(self, label: str, undo: UndoFn) -> None:
        self._undo.append((label, undo))

    def __len__(self) -> int:
        return len(self._undo)

    def rollback(self) -> None:
        """
        Run every recorded inverse in reverse order.

        A failing inverse does not stop the unwind: the remaining (older)
        inverses still run, and the failures are reported together afterwards.

        Raises:
            RollbackError: If any inverse raised
        """
        failures: List[Tuple[str, Exception]] = []
        while self._undo:
            label, undo = self._undo.pop()
            try:
                undo()
            except Exception as exc:
                logger.error("rollback step %r failed: %s", label, exc)
                failures.append((label, exc))
        if failures:
            detail = "; ".join(f"{label!r}: {exc}" for label, exc in failures)
            raise RollbackError(f"{len(failures)} rollback step(s) failed: {detail}", failures) from failures[0][1]

    def commit(self) -> None:
        self._undo.clear()
