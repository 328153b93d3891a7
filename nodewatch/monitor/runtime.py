"""Standalone monitor loop.

collect -> summarize -> self-check the summary -> detect issues -> log,
then sleep. The previous
round's statuses are returned from each cycle and handed to the next one.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import TYPE_CHECKING

import bittensor as bt

from nodewatch.audit.summary_checks import SummaryCheckResult, check_status_summary

from .collector import MetricSource, collect_round, summarize_network
from .issues import AlertThresholds, detect_issues
from .models import NodeStatus, StatusSummary, now_ms

if TYPE_CHECKING:
    from nodewatch.config import Settings


class MonitorRuntime:
    """Periodic endpoint health monitor."""

    def __init__(
        self,
        source: MetricSource,
        endpoints: Sequence[str],
        thresholds: AlertThresholds | None = None,
        poll_interval: float = 30,
        max_errors: int = 10,
    ):
        self.source = source
        self.endpoints = list(endpoints)
        self.thresholds = thresholds or AlertThresholds()
        self._poll_interval = poll_interval
        self._max_errors = max_errors
        self._running = False
        self._cycles = 0
        self.last_check: SummaryCheckResult | None = None

    @classmethod
    def from_settings(cls, settings: Settings, source: MetricSource) -> MonitorRuntime:
        """Runtime over the configured endpoints, alert thresholds and poll interval."""
        return cls(
            source,
            settings.monitored_endpoints(),
            thresholds=settings.monitor.alerts,
            poll_interval=settings.monitor.poll_interval_seconds,
        )

    async def run(self) -> None:
        """Main monitor loop. Runs until stopped."""
        self._running = True
        bt.logging.info({
            "monitor_runtime": {
                "status": "starting",
                "poll_interval": self._poll_interval,
                "endpoints": len(self.endpoints),
            }
        })

        previous: list[NodeStatus] | None = None
        consecutive_errors = 0

        while self._running:
            try:
                previous = await self.cycle(previous)
                consecutive_errors = 0
            except asyncio.CancelledError:
                break
            except Exception as e:
                consecutive_errors += 1
                bt.logging.error({"monitor_cycle_error": str(e), "consecutive": consecutive_errors})
                if consecutive_errors >= self._max_errors:
                    bt.logging.error({"monitor_runtime": "too_many_errors, stopping"})
                    break
                await asyncio.sleep(min(30, 5 * consecutive_errors))
                continue

            if not self._running:
                break
            try:
                await asyncio.sleep(self._poll_interval)
            except asyncio.CancelledError:
                break

        self._running = False
        bt.logging.info({"monitor_runtime": "stopped"})

    def stop(self) -> None:
        """Signal the runtime to stop."""
        self._running = False

    async def cycle(
        self, previous: Sequence[NodeStatus] | None = None,
    ) -> list[NodeStatus]:
        """Run one collection round and return its statuses."""
        results = await collect_round(self.source, self.endpoints)
        stats = summarize_network(results)
        self._cycles += 1

        summary = StatusSummary(
            timestamp=now_ms(), round_number=self._cycles, nodes=results, network_stats=stats,
        )
        self.last_check = check_status_summary(summary, expected_nodes=len(self.endpoints))
        if not self.last_check:
            failed = [name for name, ok in self.last_check.checks.items() if not ok]
            bt.logging.warning({"monitor_summary": {"score": self.last_check.score, "failed": failed}})

        bt.logging.info({
            "monitor_round": {
                "active_nodes": f"{stats.active_nodes}/{len(self.endpoints)}",
                "total_tps": round(stats.total_tps, 2),
                "average_fee": round(stats.average_fee, 6),
                "highest_block": stats.highest_block,
            }
        })

        prev_by_endpoint = {p.endpoint: p for p in previous or []}
        for status in results:
            if not status.is_responding:
                bt.logging.warning({"monitor_node": {"endpoint": status.endpoint, "status": "offline",
                                                     "error": status.error}})
                continue
            prev = prev_by_endpoint.get(status.endpoint)
            issues = detect_issues(
                status, prev if prev is not None and prev.is_responding else None,
                self.thresholds,
            )
            if issues:
                bt.logging.warning({"monitor_node": {"endpoint": status.endpoint, "issues": issues}})
            else:
                bt.logging.debug({"monitor_node": {"endpoint": status.endpoint, "status": "ok"}})

        return results


__all__ = ["MonitorRuntime"]
