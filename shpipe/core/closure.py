"""
In-process closure unit.

A Python function that behaves like a process and can sit anywhere in a
pipeline. Two forms:

- stream: ``fn(stdin, stdout, stderr) -> exit_code`` gets the channels and
  does its own reading and writing
- text: ``fn(stdin_text) -> (stdout_text, stderr_text, exit_code)`` (or a
  RunResult) gets the whole input pre-drained
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple, Union

from .channel import Channel
from .models import RunResult
from .runnable import Runnable

logger = logging.getLogger(__name__)

StreamFunction = Callable[[Optional[Channel], Channel, Channel], int]
TextOutput = Union[RunResult, Tuple[Optional[str], Optional[str], int]]
TextFunction = Callable[[Optional[str]], TextOutput]


class ShClosure(Runnable):
    def __init__(self, fn: StreamFunction, name: Optional[str] = None):
        super().__init__()
        self._fn = fn
        self.name = name or getattr(fn, "__name__", "closure")

    def __repr__(self) -> str:
        return f"ShClosure({self.name})"

    @classmethod
    def from_text(cls, fn: TextFunction, name: Optional[str] = None) -> "ShClosure":
        def adapter(stdin: Optional[Channel], stdout: Channel, stderr: Channel) -> int:
            out = fn(stdin.drain() if stdin is not None else None)
            if isinstance(out, RunResult):
                out_text, err_text, rc = out.stdout, out.stderr, out.exit_code
            else:
                out_text, err_text, rc = out
            if out_text:
                stdout.write(out_text)
            if err_text:
                stderr.write(err_text)
            return rc

        return cls(adapter, name=name or getattr(fn, "__name__", "closure"))

    def _execute(self, downstream: Optional[Runnable]) -> RunResult:
        stdout, stderr = Channel(), Channel()
        if downstream is not None:
            downstream.stdin = stdout

        try:
            rc = self._fn(self.stdin, stdout, stderr)
        finally:
            # unclosed write ends would hang every drain below and downstream
            stdout.close_writer()
            stderr.close_writer()

        logger.debug(f"{self!r} returned rc={rc}")
        return RunResult(
            stdout=stdout.drain() if downstream is None else None,
            stderr=stderr.drain(),
            exit_code=int(rc),
        )
