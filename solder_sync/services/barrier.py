"""
Completion barrier for the installs of one reconciliation run.
"""
from __future__ import annotations

import logging
from typing import Callable, List

from solder_sync.domain.errors import AggregateFailure

logger = logging.getLogger(__name__)


class CompletionBarrier:
    """
    Counts completions and commits once when the batch is done.

    Every expected completion (an install finishing, or an unchanged entry
    being skipped) calls ``arrive``. After dispatch the owner calls
    ``seal``; once sealed and the count reaches zero the barrier drains:
    ``on_drained`` runs if nothing failed, otherwise ``AggregateFailure``
    is raised. Draining happens at most once.

    Only the coordinating task touches the barrier, so it holds no lock.
    """

    def __init__(self, expected: int, on_drained: Callable[[], None]):
        if expected < 0:
            raise ValueError("expected must be >= 0")
        self.remaining = expected
        self.failed: List[str] = []
        self._on_drained = on_drained
        self._sealed = False
        self._drained = False

    @property
    def drained(self) -> bool:
        return self._drained

    def arrive(self, name: str, ok: bool = True) -> None:
        if self.remaining <= 0:
            raise RuntimeError(f"Unexpected completion for [{name}]: barrier already at zero")
        self.remaining -= 1
        if not ok:
            self.failed.append(name)
        self._maybe_drain()

    def seal(self) -> None:
        self._sealed = True
        self._maybe_drain()

    def _maybe_drain(self) -> None:
        if not self._sealed or self.remaining > 0:
            return
        if self._drained:
            raise RuntimeError("Completion barrier drained twice")
        self._drained = True

        if self.failed:
            raise AggregateFailure(self.failed)
        self._on_drained()
