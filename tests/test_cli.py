import numpy as np
import pytest

from shpipe.core.models import RunResult
from shpipe.core.pair import ShCmdPair
from shpipe.core.resolver import PathResolver
from shpipe.core.command import ShCmd
from shpipe.scripts import shpipe as cli

from .conftest import posix


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    # keep the CLI from rewiring the root logger under pytest
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)


def test_build_pipeline_shapes():
    single = cli.build_pipeline(["ls -l"])
    assert isinstance(single, ShCmd)
    assert single.spec.args == ["-l"]
    multi = cli.build_pipeline(["echo 'a b'", "rev"], use_path_cache=False)
    assert isinstance(multi, ShCmdPair)
    assert multi.lhs.spec.args == ["a b"]
    with pytest.raises(ValueError):
        cli.build_pipeline(["  "])


@posix
def test_run_prints_last_stage(capsys):
    rc = cli.main(["run", "echo 1:2:3", "rev", "cut -d : -f 1"])
    assert rc == 0
    assert capsys.readouterr().out == "3\n"


@posix
def test_run_returns_exit_code(capsys):
    assert cli.main(["run", "sh -c 'echo no >&2; exit 4'"]) == 4
    assert capsys.readouterr().err == "no\n"


@posix
def test_missing_command_exit_127(capsys):
    assert cli.main(["which", "ls65535"]) == 127
    assert "ls65535" in capsys.readouterr().err
    assert cli.main(["run", "--no-cache", "ls65535"]) == 127


@posix
def test_which_prints_path(capsys):
    assert cli.main(["which", "sh"]) == 0
    assert capsys.readouterr().out.strip().startswith("/")


def test_bad_config_is_reported(tmp_path, capsys):
    cfg = tmp_path / "bad.yaml"
    cfg.write_text("tools: nope\n")
    assert cli.main(["--config", str(cfg), "which", "sh"]) == 1
    assert "tools" in capsys.readouterr().err


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 1


def test_exit_status_for_signals():
    assert cli._exit_status(-9) == 137
    assert cli._exit_status(2) == 2


def test_render_result_table():
    text = cli.render_result(RunResult(stdout="hi", stderr=None, exit_code=1))
    assert "exit_code" in text
    assert "hi" in text
    assert "(none)" in text


def test_summarize_statistics():
    rows = cli.summarize({"s": np.array([0.001, 0.002, 0.003, 0.010])})
    assert rows[0]["strategy"] == "s"
    assert rows[0]["total_s"] == pytest.approx(0.016)
    assert rows[0]["mean_ms"] == pytest.approx(4.0)
    assert rows[0]["median_ms"] == pytest.approx(2.5)


@posix
def test_time_strategies_runs_each():
    timings = cli.time_strategies("true", 2)
    assert set(timings) == {"which, every run", "env dispatch", "which, cached"}
    assert all(len(v) == 2 and (v > 0).all() for v in timings.values())


@posix
def test_time_strategies_lookup_counts(monkeypatch):
    original = PathResolver.which
    callers = []

    def counting_which(self, command):
        callers.append(self)
        return original(self, command)

    monkeypatch.setattr(PathResolver, "which", counting_which)
    cli.time_strategies("true", 3)
    # three fresh resolvers for "which, every run", one lookup for the
    # shared resolver, none for env dispatch
    assert len(callers) == 4
    assert len({id(c) for c in callers}) == 4
