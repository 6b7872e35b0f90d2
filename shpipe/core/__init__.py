"""
Core modules: channels, path resolution, runnables and their composition.
"""

from .channel import Channel
from .closure import ShClosure
from .command import ShCmd
from .configuration import ConfigurationLoader, ShellConfig, get_config, set_config
from .errors import (
    AlreadyRunError,
    CommandNotFound,
    ConfigurationError,
    ShellError,
    ShellSystemError,
)
from .models import CommandSpec, ResolutionPolicy, RunResult, RunState
from .pair import ShCmdPair, pipe
from .resolver import PathResolver, default_resolver
from .runnable import Runnable

__all__ = [
    "Channel",
    "ShClosure",
    "ShCmd",
    "ShCmdPair",
    "pipe",
    "Runnable",
    "PathResolver",
    "default_resolver",
    "ConfigurationLoader",
    "ShellConfig",
    "get_config",
    "set_config",
    "CommandSpec",
    "ResolutionPolicy",
    "RunResult",
    "RunState",
    "ShellError",
    "CommandNotFound",
    "ShellSystemError",
    "AlreadyRunError",
    "ConfigurationError",
]
