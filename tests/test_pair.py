import itertools
import os
import shutil

import pytest

from shpipe.core.channel import Channel
from shpipe.core.closure import ShClosure
from shpipe.core.command import ShCmd
from shpipe.core.commands import cut, echo, ls_la, rev
from shpipe.core.errors import AlreadyRunError
from shpipe.core.models import RunResult, RunState
from shpipe.core.pair import ShCmdPair, pipe

from .conftest import posix

SH = shutil.which("sh") or "/bin/sh"


def stage(tag, rc):
    """Appends its tag to the input and reports on stderr."""
    return ShClosure.from_text(lambda text: ((text or "") + tag, f"{tag}-err", rc), name=tag)


def recorder(calls):
    def fn(text):
        calls.append(text)
        return text, None, 0
    return ShClosure.from_text(fn, name="recorder")


@posix
def test_three_stage_field_extraction():
    result = pipe(ShCmd("echo", ["1:2:3"]), ShCmd("rev"), ShCmd("cut", ["-d", ":", "-f", "1"])).run()
    assert result.exit_code == 0
    assert result.stdout.strip() == "3"


@posix
def test_operator_syntax_matches_pipe():
    result = (ShCmd("echo", ["a:b:c"]) | ShCmd("rev") | ShCmd("cut", ["-d", ":", "-f", "1"])).run()
    assert result.stdout.strip() == "c"


@posix
def test_command_factories():
    assert pipe(echo("x:y:z"), rev(), cut(":", 1)).run().stdout.strip() == "z"
    assert ls_la().spec.args == ["-l", "-a"]
    with pytest.raises(ValueError):
        cut(":", 0)


@posix
def test_failing_first_stage_short_circuits():
    script = ["-c", "echo oops >&2; exit 3"]
    alone = ShCmd.from_path(SH, script).run()

    calls = []
    second = recorder(calls)
    result = ShCmdPair(ShCmd.from_path(SH, script), second).run()

    assert result == alone
    assert result.exit_code == 3
    assert calls == []
    assert second.state is RunState.CONSTRUCTED


def test_short_circuit_with_closures():
    calls = []
    result = pipe(stage("a", 5), recorder(calls)).run()
    assert result == RunResult(stdout=None, stderr="a-err", exit_code=5)
    assert calls == []


def test_success_returns_second_result():
    result = pipe(stage("a", 0), stage("b", 7)).run()
    assert result == RunResult(stdout="ab", stderr="b-err", exit_code=7)


@pytest.mark.parametrize("rcs", list(itertools.product([0, 1], repeat=3)))
def test_pairing_is_associative(rcs):
    def build():
        return [stage(tag, rc) for tag, rc in zip("abc", rcs)]

    a, b, c = build()
    left = pipe(pipe(a, b), c).run()
    a, b, c = build()
    right = pipe(a, pipe(b, c)).run()
    a, b, c = build()
    flat = pipe(a, b, c).run()
    assert left == right == flat


def test_pipe_nests_left_to_right():
    a, b, c = stage("a", 0), stage("b", 0), stage("c", 0)
    p = pipe(a, b, c)
    assert isinstance(p.lhs, ShCmdPair)
    assert p.lhs.lhs is a and p.lhs.rhs is b and p.rhs is c
    assert isinstance(a.piped(b), ShCmdPair)


def test_pair_stdin_aliases_first_stage():
    a, b = stage("a", 0), stage("b", 0)
    outer = pipe(pipe(a, b), stage("c", 0))
    feed = Channel()
    outer.stdin = feed
    assert a.stdin is feed
    feed.write(">")
    feed.close_writer()
    assert outer.run().stdout == ">abc"


def test_nested_pair_as_downstream_receives_input():
    inner = pipe(stage("b", 0), stage("c", 0))
    assert pipe(stage("a", 0), inner).run().stdout == "abc"


def test_pair_single_shot():
    p = pipe(stage("a", 0), stage("b", 0))
    p.run()
    assert p.state is RunState.SUCCEEDED
    with pytest.raises(AlreadyRunError):
        p.run()


def test_or_rejects_non_runnables():
    with pytest.raises(TypeError):
        stage("a", 0) | "rev"


@posix
@pytest.mark.skipif(not os.path.isdir("/proc/self/fd"), reason="needs /proc/self/fd")
def test_no_descriptor_growth_over_many_pipelines(resolver):
    def open_fds():
        return len(os.listdir("/proc/self/fd"))

    def once():
        out = pipe(
            ShCmd("echo", ["1:2:3"], resolver=resolver),
            ShCmd("rev", resolver=resolver),
            ShClosure.from_text(lambda text: (text, None, 0)),
        ).run()
        assert out.stdout == "3:2:1\n"

    once()
    before = open_fds()
    for _ in range(300):
        once()
    assert open_fds() - before <= 2
