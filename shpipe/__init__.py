"""
shpipe: shell-style pipelines of external commands and Python closures.

    from shpipe import ShCmd, ShClosure, pipe

    result = pipe(ShCmd("echo", ["1:2:3"]), ShCmd("rev"), ShCmd("cut", ["-d", ":", "-f", "1"])).run()
    if result.exit_code == 0:
        print(result.stdout)
"""

from .core import *  # noqa: F401,F403
from .core import __all__

__version__ = "0.1.0"
