"""Tests for the debouncer."""

import asyncio

import pytest

from axgbolt.storefront.debounce import Debouncer


class TestDebouncer:
    """Tests for Debouncer."""

    @pytest.mark.asyncio
    async def test_burst_runs_once(self) -> None:
        """Only the last action of a burst runs."""
        calls: list[int] = []
        debouncer = Debouncer(0.01)

        for i in range(5):
            async def action(i: int = i) -> None:
                calls.append(i)

            debouncer.schedule(action)

        await debouncer.wait()
        assert calls == [4]
        assert debouncer.pending is False

    @pytest.mark.asyncio
    async def test_cancel(self) -> None:
        """Cancelled actions never run."""
        calls: list[str] = []

        async def action() -> None:
            calls.append("ran")

        debouncer = Debouncer(0.01)
        debouncer.schedule(action)
        debouncer.cancel()
        await asyncio.sleep(0.03)
        assert calls == []

    @pytest.mark.asyncio
    async def test_failure_is_contained(self) -> None:
        """A failing action does not break later ones."""
        calls: list[str] = []

        async def broken() -> None:
            raise RuntimeError("boom")

        async def action() -> None:
            calls.append("ran")

        debouncer = Debouncer(0)
        debouncer.schedule(broken)
        await debouncer.wait()
        debouncer.schedule(action)
        await debouncer.wait()
        assert calls == ["ran"]
