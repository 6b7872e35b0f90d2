"""
Logging configuration for the shpipe command line.

The library itself only creates module loggers; applications decide
where records go.
"""

import logging
import sys
import os
from pathlib import Path
from typing import Optional

LOG_ENV_VAR = "SHPIPE_LOG_FILE"


class _FastFileHandler(logging.FileHandler):
    """File handler that can fsync on flush to minimize latency.

    Note: fsync improves visibility at the cost of I/O overhead. Use when
    realtime log tailing is desired and volume is low.
    """

    def __init__(self, filename, mode="a", encoding=None, delay=False, *, fsync=False):
        super().__init__(filename, mode=mode, encoding=encoding, delay=delay)
        self._fsync = bool(fsync)

    def flush(self):
        super().flush()
        if self._fsync and self.stream and hasattr(self.stream, "fileno"):
            try:
                os.fsync(self.stream.fileno())
            except OSError:
                # fsync is best effort; never let a log flush fail the caller
                pass


def _env_flag(name: str) -> bool:
    v = os.environ.get(name)
    if v is None:
        return False
    return v not in ("0", "false", "False", "no", "NO", "")


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
    console_level: Optional[str] = None,
) -> logging.Logger:
    """
    Setup logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path; falls back to $SHPIPE_LOG_FILE,
            no file logging when neither is set
        format_string: Custom format string
        console_level: Level for the stderr handler (default WARNING)

    Returns:
        Configured logger
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper()))
    # Clear existing handlers
    for h in list(root.handlers):
        root.removeHandler(h)

    if log_file is None and os.environ.get(LOG_ENV_VAR):
        log_file = Path(os.environ[LOG_ENV_VAR])

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        low_latency = _env_flag("SHPIPE_LOG_LOW_LATENCY")
        force_fsync = _env_flag("SHPIPE_LOG_FSYNC")
        line_buffered = _env_flag("SHPIPE_LOG_LINE_BUFFERED")

        if low_latency and line_buffered:
            # Use a line-buffered stream with StreamHandler for minimal delay
            stream = open(log_path, mode="a", buffering=1, encoding="utf-8")
            fh = logging.StreamHandler(stream)
        else:
            # Default FileHandler; optionally fsync on flush
            fh = _FastFileHandler(log_path, fsync=force_fsync or low_latency)

        fh.setFormatter(logging.Formatter(format_string))
        fh.setLevel(getattr(logging, level.upper()))
        root.addHandler(fh)

    # Console handler (quiet by default); stdout is reserved for command output
    ch = logging.StreamHandler(sys.stderr)
    ch_level = console_level or "WARNING"
    ch.setLevel(getattr(logging, ch_level.upper()))
    ch.setFormatter(logging.Formatter(format_string))
    root.addHandler(ch)

    return logging.getLogger("shpipe")
