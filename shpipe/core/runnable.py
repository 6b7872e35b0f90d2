"""
The contract every executable unit satisfies.

Implementers: ShCmd (external process), ShClosure (in-process function)
and ShCmdPair (two runnables joined by a pipe). ``run`` optionally takes a
downstream runnable whose stdin is wired to this unit's stdout before
anything starts.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

from .channel import Channel
from .errors import AlreadyRunError
from .models import RunResult, RunState

if TYPE_CHECKING:
    from .pair import ShCmdPair

logger = logging.getLogger(__name__)


class Runnable(ABC):
    def __init__(self) -> None:
        self._stdin: Optional[Channel] = None
        self._state = RunState.CONSTRUCTED

    @property
    def stdin(self) -> Optional[Channel]:
        return self._stdin

    @stdin.setter
    def stdin(self, channel: Optional[Channel]) -> None:
        self._stdin = channel

    @property
    def state(self) -> RunState:
        return self._state

    def run(self, downstream: Optional["Runnable"] = None) -> RunResult:
        """Run once, feeding stdout into ``downstream`` if given."""
        if self._state is not RunState.CONSTRUCTED:
            raise AlreadyRunError(self)
        self._state = RunState.RUNNING
        try:
            result = self._execute(downstream)
        except BaseException:
            self._state = RunState.FAILED
            raise
        self._state = RunState.SUCCEEDED if result.exit_code == 0 else RunState.FAILED
        return result

    @abstractmethod
    def _execute(self, downstream: Optional["Runnable"]) -> RunResult:
        raise NotImplementedError

    def piped(self, to: "Runnable") -> "ShCmdPair":
        from .pair import pipe
        return pipe(self, to)

    def __or__(self, other: "Runnable") -> "ShCmdPair":
        if not isinstance(other, Runnable):
            return NotImplemented
        return self.piped(other)
