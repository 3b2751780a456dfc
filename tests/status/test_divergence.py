"""Tests for upstream and push-remote divergence."""

import pytest

from repostate.git.models import Head, Ref
from repostate.status.divergence import (
    push_remote_status,
    remote_commit,
    upstream_ranges,
    upstream_status,
)
from tests.conftest import sha

REFS = [
    Ref(name="main", commit=sha(1), type="head"),
    Ref(name="origin/main", commit=sha(3), type="remote_head", remote="origin"),
    Ref(name="fork/main", commit=sha(4), type="remote_head", remote="fork"),
]


def _log_args(from_ref, to_ref, n=51):
    return ("log", "--format=format:%H", f"{from_ref}..{to_ref}", "-n", str(n))


def test_remote_commit():
    assert remote_commit(REFS, "origin", "main") == sha(3)
    assert remote_commit(REFS, "origin", "gone") is None
    assert remote_commit(REFS, "fork", "main") == sha(4)


class TestUpstreamRanges:
    async def test_only_walks_nonzero_directions(self, make_ctx, runner):
        runner.add(*_log_args("main@{u}", "main"), stdout=sha(1))
        runner.add_commit(sha(1), "Local work")
        ctx = make_ctx(head=Head(name="main", commit=sha(1), ahead=1, behind=0))

        ahead, behind = upstream_ranges(ctx, 50)

        assert behind is None
        result = await ahead
        assert [c.subject for c in result.commits] == ["Local work"]
        assert runner.called("log", "--format=format:%H", "main..main@{u}") == []

    async def test_detached_head_has_no_ranges(self, make_ctx):
        ctx = make_ctx(head=Head(name=None, commit=sha(1), ahead=1, behind=1))
        assert upstream_ranges(ctx, 50) == (None, None)


class TestUpstreamStatus:
    @pytest.fixture
    def tracking_ctx(self, make_ctx):
        return make_ctx(
            head=Head(
                name="main",
                commit=sha(1),
                upstream_remote="origin",
                upstream_name="main",
            )
        )

    async def test_upstream_with_rebase(self, tracking_ctx, runner):
        runner.add_commit(sha(3), "Upstream tip")
        runner.add_config("branch.main.rebase", "true")

        upstream = await upstream_status(tracking_ctx, REFS, None, None)

        assert upstream.remote == "origin"
        assert upstream.name == "main"
        assert upstream.commit.subject == "Upstream tip"
        assert upstream.rebase is True
        assert upstream.ahead is None
        assert upstream.behind is None

    async def test_upstream_not_fetched(self, tracking_ctx):
        upstream = await upstream_status(tracking_ctx, [], None, None)
        assert upstream.commit is None
        assert upstream.rebase is False

    async def test_no_upstream_configured(self, ctx):
        assert await upstream_status(ctx, REFS, None, None) is None

    async def test_unreadable_commit_degrades(self, tracking_ctx):
        assert await upstream_status(tracking_ctx, REFS, None, None) is None


class TestPushRemoteStatus:
    async def test_no_push_remote(self, ctx):
        assert await push_remote_status(ctx, REFS, 50) is None

    async def test_ranges_always_walked(self, ctx, runner):
        runner.add_config("branch.main.pushRemote", "fork")
        runner.add(*_log_args("fork/main", "main"), stdout="")
        runner.add(*_log_args("main", "fork/main"), stdout=sha(4))
        runner.add_commit(sha(4), "Pushed elsewhere")

        push = await push_remote_status(ctx, REFS, 50)

        assert push.remote == "fork"
        assert push.name == "main"
        assert push.commit.subject == "Pushed elsewhere"
        assert push.ahead.commits == []
        assert [c.subject for c in push.behind.commits] == ["Pushed elsewhere"]

    async def test_detached_head(self, make_ctx):
        ctx = make_ctx(head=Head(name=None, commit=sha(1)))
        assert await push_remote_status(ctx, REFS, 50) is None


async def test_rebase_flag_keyed_on_upstream_branch(make_ctx, runner):
    ctx = make_ctx(
        head=Head(
            name="local",
            commit=sha(1),
            upstream_remote="origin",
            upstream_name="main",
        )
    )
    runner.add_commit(sha(3), "Upstream tip")
    runner.add_config("branch.main.rebase", "true")

    upstream = await upstream_status(ctx, REFS, None, None)

    assert upstream.rebase is True
    assert runner.called("config", "--get", "branch.local.rebase") == []
