"""
Configuration of the external helper tools.

Resolution shells out to a fixed interpreter (``sh -l -c "which <cmd>"``)
and uncached dispatch goes through a fixed ``env`` launcher. Their
locations come from, in increasing priority:

- built-in defaults
- a YAML file (``tools:`` section), passed explicitly or named by SHPIPE_CONFIG
- SHPIPE_SH / SHPIPE_ENV environment variables

Example YAML::

    tools:
      sh: /bin/sh
      sh_flags: ["-l", "-c"]
      env: /usr/bin/env
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SHPIPE_CONFIG"
SH_ENV_VAR = "SHPIPE_SH"
ENV_ENV_VAR = "SHPIPE_ENV"


@dataclass
class ShellConfig:
    """Locations of the interpreter and launcher used for path handling."""
    sh: str = "/bin/sh"
    sh_flags: List[str] = field(default_factory=lambda: ["-l", "-c"])
    env: str = "/usr/bin/env"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ShellConfig':
        """Create ShellConfig from the ``tools`` mapping of a config file."""
        defaults = cls()
        flags = data.get('sh_flags', defaults.sh_flags)
        if not isinstance(flags, list) or not all(isinstance(f, str) for f in flags):
            raise ConfigurationError("tools.sh_flags must be a list of strings")
        return cls(
            sh=str(data.get('sh', defaults.sh)),
            sh_flags=list(flags),
            env=str(data.get('env', defaults.env)),
        )


class ConfigurationLoader:
    """Build a ShellConfig from file and environment."""

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        if config_path is None:
            config_path = os.environ.get(CONFIG_ENV_VAR) or None
        self.config_path = Path(config_path) if config_path else None

    def load(self) -> ShellConfig:
        data: Dict[str, Any] = {}
        if self.config_path is not None:
            data = self._read_tools_section(self.config_path)
        config = ShellConfig.from_dict(data)

        sh_override = os.environ.get(SH_ENV_VAR)
        if sh_override:
            config.sh = sh_override
        env_override = os.environ.get(ENV_ENV_VAR)
        if env_override:
            config.env = env_override

        logger.debug(f"Loaded shell config: sh={config.sh} flags={config.sh_flags} env={config.env}")
        return config

    @staticmethod
    def _read_tools_section(path: Path) -> Dict[str, Any]:
        try:
            raw = yaml.safe_load(path.read_text())
        except FileNotFoundError as e:
            raise ConfigurationError(f"config file not found: {path}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"invalid YAML in {path}: {e}") from e
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ConfigurationError(f"{path}: top level must be a mapping")
        tools = raw.get('tools') or {}
        if not isinstance(tools, dict):
            raise ConfigurationError(f"{path}: 'tools' must be a mapping")
        return tools


_active: Optional[ShellConfig] = None
_active_lock = threading.Lock()


def get_config() -> ShellConfig:
    """Return the active configuration, loading it on first use."""
    global _active
    with _active_lock:
        if _active is None:
            _active = ConfigurationLoader().load()
        return _active


def set_config(config: Optional[ShellConfig]) -> None:
    """Replace the active configuration; None reloads lazily on next use."""
    global _active
    with _active_lock:
        _active = config
