"""
Pydantic models shared by every runnable: the run result and the
unresolved command specification.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, field_validator, model_validator


class ResolutionPolicy(str, Enum):
    """How a command name becomes an executable path."""
    CACHED = "cached"      # which once per name, then reuse the cached path
    DISPATCH = "dispatch"  # hand the name to env, which searches PATH every time


class RunState(Enum):
    CONSTRUCTED = "constructed"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RunResult(BaseModel):
    stdout: Optional[str] = None
    stderr: Optional[str] = None
    exit_code: int

    @field_validator("stdout", "stderr")
    @classmethod
    def empty_is_absent(cls, v: Optional[str]) -> Optional[str]:
        # zero bytes of output is reported as None, never as ""
        return v or None

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class CommandSpec(BaseModel):
    """Unresolved description of an external program invocation.

    Exactly one of ``command`` (a bare name to resolve at run time) or
    ``path`` (used verbatim) is set. ``args=None`` keeps the default
    argument vector; ``args=[]`` is an explicit empty override.
    """

    command: Optional[str] = None
    path: Optional[str] = None
    args: Optional[List[str]] = None
    env: Optional[Dict[str, str]] = None
    policy: ResolutionPolicy = ResolutionPolicy.CACHED

    @field_validator("command", "path")
    @classmethod
    def not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("must not be blank")
        return v

    @model_validator(mode="after")
    def one_target(self) -> "CommandSpec":
        if (self.command is None) == (self.path is None):
            raise ValueError("exactly one of command or path must be set")
        return self

    @property
    def name(self) -> str:
        return self.command if self.command is not None else self.path  # type: ignore[return-value]
