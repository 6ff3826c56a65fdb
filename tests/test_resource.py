"""Tests for Resource."""

import asyncio
import logging

import pytest

from signalry import Owner, Resource, autorun


class TestResourceInitialState:
    def test_idle_until_refresh(self):
        calls = []

        async def producer():
            calls.append(1)
            return "data"

        r = Resource(producer)
        assert r.data.get() is None
        assert r.loading.get() is False
        assert r.error.get() is None
        assert r.status.get() == "idle"
        assert calls == []

    def test_rejects_non_callable(self):
        with pytest.raises(TypeError):
            Resource("not callable")

    def test_refresh_requires_running_loop(self):
        async def producer():
            return 1

        with pytest.raises(RuntimeError):
            Resource(producer).refresh()


class TestResourceLoading:
    @pytest.mark.asyncio
    async def test_success(self):
        async def producer():
            await asyncio.sleep(0)
            return {"name": "Ada"}

        r = Resource(producer)
        task = r.refresh()
        assert r.loading.get() is True
        assert r.status.get() == "loading"
        await task
        assert r.data.get() == {"name": "Ada"}
        assert r.error.get() is None
        assert r.loading.get() is False
        assert r.status.get() == "success"

    @pytest.mark.asyncio
    async def test_failure_is_captured_not_raised(self, caplog):
        error = RuntimeError("network down")

        async def producer():
            raise error

        r = Resource(producer)
        with caplog.at_level(logging.DEBUG, logger="signalry.resource"):
            await r.refresh()  # does not raise
        assert r.error.get() is error
        assert r.data.get() is None
        assert r.loading.get() is False
        assert r.status.get() == "error"
        assert "failed" in caplog.text

    @pytest.mark.asyncio
    async def test_synchronous_producer_error_is_captured(self):
        def producer():
            raise ValueError("bad arguments")

        r = Resource(producer)
        await r.refresh()
        assert isinstance(r.error.get(), ValueError)

    @pytest.mark.asyncio
    async def test_refresh_clears_previous_error(self):
        attempts = []

        async def producer():
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("first try fails")
            return "ok"

        r = Resource(producer)
        await r.refresh()
        assert r.error.get() is not None
        task = r.refresh()
        assert r.error.get() is None
        assert r.data.get() is None
        await task
        assert r.data.get() == "ok"
        assert r.error.get() is None

    @pytest.mark.asyncio
    async def test_loading_transitions_once_per_refresh(self):
        async def producer():
            await asyncio.sleep(0)
            return 1

        r = Resource(producer)
        transitions = []
        autorun(lambda: transitions.append(r.loading.get()))
        await r.refresh()
        await r.refresh()
        assert transitions == [False, True, False, True, False]

    @pytest.mark.asyncio
    async def test_completion_is_one_settled_update(self):
        async def producer():
            return "value"

        r = Resource(producer)
        snapshots = []
        autorun(lambda: snapshots.append((r.data.get(), r.loading.get(), r.error.get())))
        await r.refresh()
        assert snapshots == [(None, False, None), (None, True, None), ("value", False, None)]


class TestResourceRaces:
    @pytest.mark.asyncio
    async def test_latest_refresh_wins_when_earlier_finishes_last(self):
        gates = [asyncio.Event(), asyncio.Event()]
        results = iter(["first", "second"])

        async def producer():
            gate = gates.pop(0)
            result = next(results)
            await gate.wait()
            return result

        first_gate, second_gate = gates
        r = Resource(producer)
        first = r.refresh()
        second = r.refresh()
        await asyncio.sleep(0)  # both producers started

        second_gate.set()
        await second
        assert r.data.get() == "second"
        assert r.loading.get() is False

        first_gate.set()
        await first
        assert r.data.get() == "second"  # stale result dropped
        assert r.loading.get() is False

    @pytest.mark.asyncio
    async def test_earlier_finishing_first_does_not_end_loading(self):
        gates = [asyncio.Event(), asyncio.Event()]
        results = iter(["first", "second"])

        async def producer():
            gate = gates.pop(0)
            result = next(results)
            await gate.wait()
            return result

        first_gate, second_gate = gates
        r = Resource(producer)
        first = r.refresh()
        second = r.refresh()
        await asyncio.sleep(0)

        first_gate.set()
        await first
        assert r.loading.get() is True
        assert r.data.get() is None

        second_gate.set()
        await second
        assert r.data.get() == "second"
        assert r.loading.get() is False
        assert r.generation == 2

    @pytest.mark.asyncio
    async def test_stale_failure_is_dropped(self):
        gate = asyncio.Event()
        calls = []

        async def producer():
            calls.append(1)
            if len(calls) == 1:
                await gate.wait()
                raise RuntimeError("stale failure")
            return "fresh"

        r = Resource(producer)
        first = r.refresh()
        await asyncio.sleep(0)
        await r.refresh()
        gate.set()
        await first
        assert r.data.get() == "fresh"
        assert r.error.get() is None


class TestResourceDispose:
    @pytest.mark.asyncio
    async def test_dispose_cancels_in_flight(self):
        started = asyncio.Event()

        async def producer():
            started.set()
            await asyncio.sleep(10)
            return "never"

        r = Resource(producer)
        task = r.refresh()
        await started.wait()
        r.dispose()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert r.loading.get() is False
        assert r.data.get() is None

    @pytest.mark.asyncio
    async def test_owner_disposes(self):
        async def producer():
            await asyncio.sleep(10)

        with Owner() as owner:
            r = Resource(producer, owner=owner)
            task = r.refresh()
            await asyncio.sleep(0)
        await asyncio.gather(task, return_exceptions=True)
        assert task.cancelled()
        assert r.loading.get() is False
