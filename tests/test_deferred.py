"""Tests for the cancellable future."""

import asyncio

import pytest

from tickloop.core.deferred import Deferred


class TestDeferredSettlement:
    """Tests for resolve/reject."""

    @pytest.mark.asyncio
    async def test_resolve(self):
        """Test resolving delivers the value to awaiters."""
        d = Deferred()
        d.resolve(42)
        assert await d == 42

    @pytest.mark.asyncio
    async def test_reject(self):
        """Test rejecting raises the error in awaiters."""
        d = Deferred()
        d.reject(ValueError("bad"))
        with pytest.raises(ValueError, match="bad"):
            await d

    @pytest.mark.asyncio
    async def test_first_settlement_wins(self):
        """Test later resolve/reject calls are ignored."""
        d = Deferred()
        d.resolve("first")
        d.resolve("second")
        d.reject(RuntimeError("late"))
        assert d.result() == "first"

    @pytest.mark.asyncio
    async def test_resolve_after_cancel_is_ignored(self):
        """Test a cancelled future stays cancelled."""
        d = Deferred()
        d.cancel()
        d.resolve("value")
        d.reject(RuntimeError("late"))
        assert d.cancelled()


class TestDeferredCancellation:
    """Tests for the cancellation hook."""

    @pytest.mark.asyncio
    async def test_hook_runs_once_synchronously(self):
        """Test the hook runs inside cancel() and only once."""
        calls = []
        d = Deferred(lambda: calls.append("hook"), reason="op was cancelled")

        assert d.cancel() is True
        assert calls == ["hook"]
        assert d.cancel() is False
        assert calls == ["hook"]

    @pytest.mark.asyncio
    async def test_cancelled_error_carries_reason(self):
        """Test the reason is the message of the CancelledError."""
        d = Deferred(reason="op was cancelled")
        d.cancel()
        with pytest.raises(asyncio.CancelledError, match="op was cancelled"):
            d.result()

    @pytest.mark.asyncio
    async def test_explicit_message_overrides_reason(self):
        """Test cancel(msg) wins over the default reason."""
        d = Deferred(reason="default")
        d.cancel("explicit")
        with pytest.raises(asyncio.CancelledError, match="explicit"):
            d.result()

    @pytest.mark.asyncio
    async def test_hook_not_run_after_settlement(self):
        """Test cancelling a settled future does nothing."""
        calls = []
        d = Deferred(lambda: calls.append("hook"))
        d.resolve(1)
        assert d.cancel() is False
        assert calls == []

    @pytest.mark.asyncio
    async def test_cancelling_awaiting_task_cancels_future(self):
        """Test cancellation of a waiter propagates to the future."""
        calls = []
        d = Deferred(lambda: calls.append("hook"))

        async def wait():
            return await d

        task = asyncio.ensure_future(wait())
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert d.cancelled()
        assert calls == ["hook"]


class TestDeferredAlways:
    """Tests for completion hooks."""

    @pytest.mark.asyncio
    async def test_runs_on_every_outcome(self):
        """Test always() fires on resolve, reject and cancel."""
        seen = []
        resolved, rejected, cancelled = Deferred(), Deferred(), Deferred()
        resolved.always(lambda: seen.append("resolved"))
        rejected.always(lambda: seen.append("rejected"))
        cancelled.always(lambda: seen.append("cancelled"))

        resolved.resolve(None)
        rejected.reject(RuntimeError("x"))
        rejected.exception()
        cancelled.cancel()

        assert seen == ["resolved", "rejected", "cancelled"]

    @pytest.mark.asyncio
    async def test_runs_after_cancellation_hook(self):
        """Test the cancellation hook runs before completion hooks."""
        order = []
        d = Deferred(lambda: order.append("cancel"))
        d.always(lambda: order.append("always"))
        d.cancel()
        assert order == ["cancel", "always"]

    @pytest.mark.asyncio
    async def test_registered_on_done_future_runs_immediately(self):
        """Test late registration fires right away."""
        seen = []
        d = Deferred()
        d.resolve(1)
        d.always(lambda: seen.append("late"))
        assert seen == ["late"]
