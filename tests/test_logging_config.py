import logging

import pytest

from shpipe.utils import logging_config
from shpipe.utils.logging_config import setup_logging


@pytest.fixture
def restore_root():
    root = logging.getLogger()
    saved, level = list(root.handlers), root.level
    yield root
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in saved:
        root.addHandler(h)
    root.setLevel(level)


def test_file_logging(tmp_path, restore_root):
    log_file = tmp_path / "logs" / "shpipe.log"
    logger = setup_logging(level="DEBUG", log_file=log_file)
    logging.getLogger("shpipe.core.command").debug("spawned something")
    for h in restore_root.handlers:
        h.flush()
    assert logger.name == "shpipe"
    assert "spawned something" in log_file.read_text()


def test_no_file_without_path(tmp_path, restore_root, monkeypatch):
    monkeypatch.delenv(logging_config.LOG_ENV_VAR, raising=False)
    setup_logging(level="INFO")
    assert not any(isinstance(h, logging.FileHandler) for h in restore_root.handlers)


def test_fsync_flag_and_env_path(tmp_path, restore_root, monkeypatch):
    monkeypatch.setenv(logging_config.LOG_ENV_VAR, str(tmp_path / "env.log"))
    monkeypatch.setenv("SHPIPE_LOG_FSYNC", "1")
    setup_logging(level="WARNING")
    handlers = [h for h in restore_root.handlers if isinstance(h, logging_config._FastFileHandler)]
    assert len(handlers) == 1
    assert handlers[0]._fsync is True
    logging.getLogger("shpipe").warning("synced")
    handlers[0].flush()
    assert "synced" in (tmp_path / "env.log").read_text()
