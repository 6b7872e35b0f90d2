"""
External process unit.

``ShCmd`` holds an unresolved CommandSpec. Nothing is looked up or
spawned at construction; resolution happens inside ``run`` so a missing
command surfaces as a run-time CommandNotFound.
"""

from __future__ import annotations

import logging
import os
import subprocess
from typing import Dict, List, Optional

from .channel import Channel
from .configuration import get_config
from .errors import CommandNotFound, ShellSystemError
from .models import CommandSpec, ResolutionPolicy, RunResult
from .resolver import PathResolver, default_resolver
from .runnable import Runnable

logger = logging.getLogger(__name__)

# exit status env(1) reports when it cannot find the program
_ENV_NOT_FOUND = 127


class ShCmd(Runnable):
    """One invocation of an external program.

    Examples::

        ShCmd("ls", ["-l"]).run()
        ShCmd("ls", use_path_cache=False).run()   # dispatched through env
        ShCmd.from_path("/bin/echo", ["hi"]).run()
    """

    def __init__(
        self,
        command: str,
        args: Optional[List[str]] = None,
        env: Optional[Dict[str, str]] = None,
        *,
        use_path_cache: bool = True,
        resolver: Optional[PathResolver] = None,
    ):
        policy = ResolutionPolicy.CACHED if use_path_cache else ResolutionPolicy.DISPATCH
        spec = CommandSpec(command=command, args=args, env=env, policy=policy)
        self._init_spec(spec, resolver)

    @classmethod
    def from_path(
        cls,
        path: str,
        args: Optional[List[str]] = None,
        env: Optional[Dict[str, str]] = None,
    ) -> "ShCmd":
        """Command with a known executable path; no resolution is performed."""
        return cls.from_spec(CommandSpec(path=path, args=args, env=env))

    @classmethod
    def from_spec(cls, spec: CommandSpec, resolver: Optional[PathResolver] = None) -> "ShCmd":
        cmd = cls.__new__(cls)
        cmd._init_spec(spec, resolver)
        return cmd

    def _init_spec(self, spec: CommandSpec, resolver: Optional[PathResolver]) -> None:
        Runnable.__init__(self)
        self.spec = spec
        self._resolver = resolver
        self.path: Optional[str] = None
        self.pid: Optional[int] = None

    def __repr__(self) -> str:
        return f"ShCmd({self.spec.name!r}, {self.spec.args!r})"

    @property
    def resolver(self) -> PathResolver:
        return self._resolver if self._resolver is not None else default_resolver()

    def _argv(self) -> List[str]:
        spec = self.spec
        args = list(spec.args) if spec.args is not None else []
        if spec.path is not None:
            self.path = spec.path
            return [spec.path, *args]
        if spec.policy is ResolutionPolicy.DISPATCH:
            self.path = get_config().env
            return [self.path, spec.command, *args]  # type: ignore[list-item]
        self.path = self.resolver.resolve(spec.command)  # type: ignore[arg-type]
        return [self.path, *args]

    def _execute(self, downstream: Optional[Runnable]) -> RunResult:
        argv = self._argv()

        stdout, stderr = Channel(), Channel()
        if downstream is not None:
            downstream.stdin = stdout

        feed = self.stdin
        try:
            proc = subprocess.Popen(
                argv,
                stdin=subprocess.PIPE if feed is not None else None,
                stdout=stdout.write_fd,
                stderr=stderr.write_fd,
                env=self.spec.env,
            )
        except OSError:
            logger.debug(f"Failed to spawn {argv[0]}", exc_info=True)
            raise
        finally:
            # the child holds its own copies; ours must go or drains never end
            stdout.close_writer()
            stderr.close_writer()

        self.pid = proc.pid
        logger.debug(f"Spawned pid={proc.pid}: {argv}")
        data = feed.drain_bytes() if feed is not None else None
        proc.communicate(input=data)

        if proc.returncode is None:
            raise ShellSystemError(f"pid {proc.pid} still running after wait")
        rc = proc.returncode

        result = RunResult(
            stdout=stdout.drain() if downstream is None else None,
            stderr=stderr.drain(),
            exit_code=rc,
        )
        if self.spec.policy is ResolutionPolicy.DISPATCH and self._dispatch_missed(result):
            raise CommandNotFound(self.spec.command)  # type: ignore[arg-type]
        logger.debug(f"{self!r} exited rc={rc}")
        return result

    def _dispatch_missed(self, result: RunResult) -> bool:
        # env's own diagnostic only, prefixed with the launcher's name
        if result.exit_code != _ENV_NOT_FOUND or result.stdout is not None or not result.stderr:
            return False
        first = result.stderr.splitlines()[0]
        launcher = self.path or ""
        if not first.startswith((f"{launcher}:", f"{os.path.basename(launcher)}:")):
            return False
        name = self.spec.command
        return any(q in first for q in (f"'{name}'", f"\u2018{name}\u2019", f"\"{name}\""))
