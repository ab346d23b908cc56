"""Tests for the trailing-edge debouncer."""

import asyncio
import logging

import pytest

from documents_view.metadata.debounce import Debouncer


class Recorder:

    def __init__(self, error=None):
        self.calls = []
        self.error = error

    async def __call__(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        if self.error is not None:
            raise self.error


class TestDebouncer:

    @pytest.mark.asyncio
    async def test_burst_runs_once_with_latest_arguments(self):
        recorder = Recorder()
        debouncer = Debouncer(recorder, delay=0.01)

        debouncer("first")
        debouncer("second")
        debouncer("third", source="blur")
        assert debouncer.pending is True

        await asyncio.sleep(0.05)
        await debouncer.wait()

        assert recorder.calls == [(("third",), {"source": "blur"})]
        assert debouncer.pending is False

    @pytest.mark.asyncio
    async def test_cancel_drops_pending_call(self):
        recorder = Recorder()
        debouncer = Debouncer(recorder, delay=0.01)

        debouncer("value")
        debouncer.cancel()
        await asyncio.sleep(0.05)

        assert recorder.calls == []
        assert debouncer.pending is False

    @pytest.mark.asyncio
    async def test_flush_runs_pending_call_immediately(self):
        recorder = Recorder()
        debouncer = Debouncer(recorder, delay=10)

        debouncer(1)
        await debouncer.flush()

        assert recorder.calls == [((1,), {})]
        assert debouncer.pending is False

    @pytest.mark.asyncio
    async def test_flush_without_pending_call_is_noop(self):
        recorder = Recorder()
        debouncer = Debouncer(recorder, delay=0.01)

        await debouncer.flush()

        assert recorder.calls == []

    @pytest.mark.asyncio
    async def test_separate_bursts_each_fire(self):
        recorder = Recorder()
        debouncer = Debouncer(recorder, delay=10)

        debouncer("a")
        await debouncer.flush()
        debouncer("b")
        await debouncer.flush()

        assert [args for args, _ in recorder.calls] == [("a",), ("b",)]

    @pytest.mark.asyncio
    async def test_callback_failure_is_logged(self, caplog):
        recorder = Recorder(error=RuntimeError("save failed"))
        debouncer = Debouncer(recorder, delay=10)

        with caplog.at_level(logging.ERROR):
            debouncer("value")
            await debouncer.flush()

        assert len(recorder.calls) == 1
        assert "Debounced call failed" in caplog.text
