import shutil

import pytest

from shpipe.core.configuration import set_config
from shpipe.core.resolver import PathResolver


def requires(*tools):
    missing = [t for t in tools if shutil.which(t) is None]
    return pytest.mark.skipif(bool(missing), reason=f"missing tools: {', '.join(missing)}")


# the tools the external-process tests lean on
posix = requires("sh", "which", "env", "echo", "rev", "cut")


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    for var in ("SHPIPE_CONFIG", "SHPIPE_SH", "SHPIPE_ENV"):
        monkeypatch.delenv(var, raising=False)
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def resolver():
    return PathResolver()
