"""Tests for the standalone monitor loop."""

import asyncio

import pytest

from nodewatch.config import Settings
from nodewatch.monitor.issues import AlertThresholds
from nodewatch.monitor.models import NodeStatus
from nodewatch.monitor.runtime import MonitorRuntime


class SequenceSource:
    """Returns a rising slot each round so consecutive cycles differ."""

    metrics = ("slot",)

    def __init__(self):
        self.slot = 100

    async def fetch(self, endpoint, metric):
        return self.slot

    def build(self, endpoint, values, response_time_ms):
        return NodeStatus(
            endpoint=endpoint, is_responding=True, block_height=values["slot"],
            response_time=response_time_ms, health="healthy",
        )


class FullSource(SequenceSource):
    """Also reports gas price and peers, so every summary check can pass."""

    def build(self, endpoint, values, response_time_ms):
        return NodeStatus(
            endpoint=endpoint, is_responding=True, block_height=values["slot"],
            response_time=response_time_ms, health="healthy", gas_price=1.5, peer_count=8,
        )


class FailingSource:
    metrics = ("slot",)

    async def fetch(self, endpoint, metric):
        raise ConnectionError("down")

    def build(self, endpoint, values, response_time_ms):
        raise AssertionError("never built")


class TestMonitorRuntime:

    @pytest.mark.asyncio
    async def test_cycle_returns_statuses(self):
        runtime = MonitorRuntime(SequenceSource(), ["https://a", "https://b"])
        results = await runtime.cycle()
        assert [r.block_height for r in results] == [100, 100]

    @pytest.mark.asyncio
    async def test_cycle_threads_previous(self):
        source = SequenceSource()
        runtime = MonitorRuntime(source, ["https://a"])
        first = await runtime.cycle()
        source.slot = 120
        second = await runtime.cycle(first)
        assert second[0].block_height == 120
        assert first[0].block_height == 100

    @pytest.mark.asyncio
    async def test_offline_endpoints_do_not_raise(self):
        runtime = MonitorRuntime(FailingSource(), ["https://a"])
        results = await runtime.cycle()
        assert not results[0].is_responding

    @pytest.mark.asyncio
    async def test_run_stops_when_requested(self):
        runtime = MonitorRuntime(SequenceSource(), ["https://a"], poll_interval=0.01)
        task = asyncio.create_task(runtime.run())
        await asyncio.sleep(0.05)
        runtime.stop()
        await asyncio.wait_for(task, timeout=1.0)
        assert not runtime._running

    @pytest.mark.asyncio
    async def test_run_gives_up_after_repeated_errors(self, monkeypatch):
        runtime = MonitorRuntime(SequenceSource(), ["https://a"], max_errors=2)

        async def boom(previous=None):
            raise RuntimeError("cycle failed")

        async def no_sleep(_):
            return None

        monkeypatch.setattr(runtime, "cycle", boom)
        monkeypatch.setattr("nodewatch.monitor.runtime.asyncio.sleep", no_sleep)
        await asyncio.wait_for(runtime.run(), timeout=1.0)
        assert not runtime._running

    @pytest.mark.asyncio
    async def test_cycle_checks_round_summary(self):
        runtime = MonitorRuntime(FullSource(), ["https://a", "https://b"])
        await runtime.cycle()
        assert runtime.last_check.is_valid
        assert runtime.last_check.score == 1.0

    @pytest.mark.asyncio
    async def test_summary_check_flags_missing_metrics(self):
        runtime = MonitorRuntime(SequenceSource(), ["https://a"])
        await runtime.cycle()
        assert not runtime.last_check
        assert runtime.last_check.checks["validGasPrices"] is False
        assert runtime.last_check.checks["validPeerCounts"] is False
        assert runtime.last_check.checks["hasAllNodes"] is True


class TestMonitorRuntimeFromSettings:

    def test_uses_configured_values(self):
        settings = Settings(
            _env_file=None,
            endpoints=["https://a", "https://b"],
            monitor={"poll_interval_seconds": 7, "alerts": {"response_time_ms": 1234}},
        )
        runtime = MonitorRuntime.from_settings(settings, SequenceSource())
        assert runtime.endpoints == ["https://a", "https://b"]
        assert runtime.thresholds == AlertThresholds(response_time_ms=1234)
        assert runtime._poll_interval == 7

    def test_falls_back_to_network_endpoints(self):
        settings = Settings(_env_file=None, network="devnet")
        runtime = MonitorRuntime.from_settings(settings, SequenceSource())
        assert runtime.endpoints == settings.monitored_endpoints()
        assert all("dev" in e for e in runtime.endpoints)
