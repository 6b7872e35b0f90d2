"""
Pipeline composition.

``pipe(a, b)`` joins two runnables so that a's stdout feeds b's stdin.
Longer pipelines nest pairs left to right: ``pipe(a, b, c)`` is
``pipe(pipe(a, b), c)``. A non-zero exit stops the chain: the failing
stage's result is returned and later stages never start.
"""

from __future__ import annotations

import logging
from typing import Optional

from .channel import Channel
from .models import RunResult
from .runnable import Runnable

logger = logging.getLogger(__name__)


class ShCmdPair(Runnable):
    def __init__(self, lhs: Runnable, rhs: Runnable):
        super().__init__()
        self._lhs = lhs
        self._rhs = rhs

    def __repr__(self) -> str:
        return f"({self._lhs!r} | {self._rhs!r})"

    @property
    def lhs(self) -> Runnable:
        return self._lhs

    @property
    def rhs(self) -> Runnable:
        return self._rhs

    @property
    def stdin(self) -> Optional[Channel]:
        return self._lhs.stdin

    @stdin.setter
    def stdin(self, channel: Optional[Channel]) -> None:
        self._lhs.stdin = channel

    def _execute(self, downstream: Optional[Runnable]) -> RunResult:
        result = self._lhs.run(self._rhs)
        if result.exit_code != 0:
            logger.debug(f"{self._lhs!r} exited rc={result.exit_code}; not starting {self._rhs!r}")
            return result
        return self._rhs.run(downstream)


def pipe(first: Runnable, second: Runnable, *more: Runnable) -> ShCmdPair:
    """Left-associative composition of two or more runnables."""
    pair = ShCmdPair(first, second)
    for nxt in more:
        pair = ShCmdPair(pair, nxt)
    return pair
