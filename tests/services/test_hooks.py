"""
Tests for post-commit hooks.
"""

import pytest

from parkadmin.services.hooks import HookFailure, PostCommitHooks, failures_warning


@pytest.mark.asyncio
class TestPostCommitHooks:

    async def test_runs_in_order_and_empties_the_list(self):
        calls = []
        hooks = PostCommitHooks()

        async def first():
            calls.append("first")

        async def second():
            calls.append("second")
            return []

        hooks.add("first", first)
        hooks.add("second", second)
        assert len(hooks) == 2

        assert await hooks.run() == []
        assert calls == ["first", "second"]
        assert len(hooks) == 0

    async def test_raising_hook_does_not_stop_the_others(self):
        calls = []
        hooks = PostCommitHooks()

        async def broken():
            raise RuntimeError("cdn down")

        async def after():
            calls.append("after")

        hooks.add("delete_images", broken)
        hooks.add("after", after)

        failures = await hooks.run()

        assert failures == [HookFailure("delete_images", "cdn down")]
        assert calls == ["after"]

    async def test_returned_error_list_counts_as_failures(self):
        hooks = PostCommitHooks()

        async def partial():
            return ["park-admin/a: timed out", "park-admin/b: timed out"]

        hooks.add("delete_images", partial)

        failures = await hooks.run()

        assert [str(f) for f in failures] == [
            "delete_images: park-admin/a: timed out",
            "delete_images: park-admin/b: timed out",
        ]


def test_failures_warning():
    assert failures_warning([]) is None
    assert failures_warning([HookFailure("delete_images", "boom")]) == (
        "Some cleanup steps failed: delete_images: boom"
    )
