# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

import asyncio
import time

import pytest

from guardchain.chain.context import Canceled, DeadlineExceeded, background


class TestContext:
    def test_background_is_never_cancelled(self):
        ctx = background()
        assert ctx.deadline is None
        assert ctx.err is None
        assert not ctx.cancelled
        assert ctx.remaining() is None

    def test_values_are_inherited_and_parent_untouched(self):
        parent = background().with_value("user", "alice")
        child = parent.with_value("role", "admin")

        assert child.value("user") == "alice"
        assert child.value("role") == "admin"
        assert parent.value("role") is None
        assert parent.value("role", "guest") == "guest"

    def test_cancel_propagates_to_children_only(self):
        parent, cancel_parent = background().with_cancel()
        child, cancel_child = parent.with_cancel()
        grandchild = child.with_value("k", "v")

        cancel_child()
        assert child.cancelled and isinstance(child.err, Canceled)
        assert grandchild.cancelled
        assert not parent.cancelled

        sibling, _ = parent.with_cancel()
        cancel_parent()
        assert sibling.cancelled

    def test_cancel_is_idempotent(self):
        ctx, cancel = background().with_cancel()
        cancel()
        first = ctx.err
        cancel()
        assert ctx.err is first

    def test_derived_from_cancelled_parent_starts_cancelled(self):
        parent, cancel = background().with_cancel()
        cancel()
        child, _ = parent.with_cancel()
        assert child.cancelled

    def test_child_deadline_never_exceeds_parent(self):
        parent, cancel_parent = background().with_timeout(10)
        child, cancel_child = parent.with_timeout(60)
        try:
            assert child.deadline == parent.deadline
        finally:
            cancel_child()
            cancel_parent()

    def test_timeout_outside_event_loop(self):
        ctx, _ = background().with_timeout(0.05)
        time.sleep(0.3)
        assert isinstance(ctx.err, DeadlineExceeded)

    def test_cancel_releases_deadline(self):
        ctx, cancel = background().with_timeout(0.05)
        cancel()
        time.sleep(0.15)
        assert isinstance(ctx.err, Canceled)

    def test_non_positive_timeout_expires_immediately(self):
        ctx, _ = background().with_timeout(0)
        assert isinstance(ctx.err, DeadlineExceeded)


class TestContextWait:
    def test_wait_returns_deadline_exceeded(self):
        async def run():
            ctx, _ = background().with_timeout(0.05)
            started = time.monotonic()
            err = await asyncio.wait_for(ctx.wait(), timeout=2)
            return err, time.monotonic() - started

        err, elapsed = asyncio.run(run())
        assert isinstance(err, DeadlineExceeded)
        assert elapsed < 1.0

    def test_wait_wakes_on_cancel(self):
        async def run():
            ctx, cancel = background().with_cancel()
            asyncio.get_running_loop().call_later(0.02, cancel)
            return await asyncio.wait_for(ctx.wait(), timeout=2)

        assert isinstance(asyncio.run(run()), Canceled)

    def test_wait_on_already_cancelled(self):
        async def run():
            ctx, cancel = background().with_cancel()
            cancel()
            return await ctx.wait()

        assert isinstance(asyncio.run(run()), Canceled)

    def test_background_wait_blocks(self):
        async def run():
            with pytest.raises(asyncio.TimeoutError):
                await asyncio.wait_for(background().wait(), timeout=0.05)

        asyncio.run(run())

    def test_off_loop_cancel_stops_loop_timer_on_its_own_thread(self):
        parent, cancel_parent = background().with_cancel()

        async def run():
            child, _ = parent.with_timeout(30)
            handle = child._timer
            await asyncio.get_running_loop().run_in_executor(None, cancel_parent)
            await asyncio.sleep(0.01)
            return child, handle

        child, handle = asyncio.run(run())
        assert isinstance(child.err, Canceled)
        assert handle.cancelled()
