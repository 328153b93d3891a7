"""Per-round metric collection.

A MetricSource knows which metric requests an endpoint needs and how to
turn their answers into a NodeStatus. The collector fires every request
for an endpoint at once, waits for all of them, and degrades the whole
endpoint to the offline sentinel if any single request failed. There is
no retry: one failed call marks the endpoint down for the round.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

import bittensor as bt

from .models import NetworkStats, NodeStatus


@runtime_checkable
class MetricSource(Protocol):
    """Network-specific metric requests for one endpoint."""

    metrics: tuple[str, ...]

    async def fetch(self, endpoint: str, metric: str) -> Any:
        """Issue one metric request against ``endpoint``."""
        ...

    def build(
        self, endpoint: str, values: dict[str, Any], response_time_ms: int,
    ) -> NodeStatus:
        """Assemble a NodeStatus from every metric's answer."""
        ...


async def check_node(source: MetricSource, endpoint: str) -> NodeStatus:
    """Collect every metric for one endpoint, or the offline sentinel."""
    start = time.monotonic()
    answers = await asyncio.gather(
        *(source.fetch(endpoint, metric) for metric in source.metrics),
        return_exceptions=True,
    )

    failures = [
        (metric, a) for metric, a in zip(source.metrics, answers)
        if isinstance(a, BaseException)
    ]
    if failures:
        metric, error = failures[0]
        bt.logging.warning({
            "collector": {"endpoint": endpoint, "failed_metric": metric, "error": str(error)}
        })
        return NodeStatus.offline(endpoint, error=f"{metric}: {error}")

    elapsed_ms = int((time.monotonic() - start) * 1000)
    try:
        return source.build(endpoint, dict(zip(source.metrics, answers)), elapsed_ms)
    except Exception as e:
        bt.logging.warning({"collector": {"endpoint": endpoint, "build_error": str(e)}})
        return NodeStatus.offline(endpoint, error=str(e))


async def collect_round(
    source: MetricSource, endpoints: Sequence[str],
) -> list[NodeStatus]:
    """Check all endpoints concurrently. Output order matches ``endpoints``."""
    return list(await asyncio.gather(*(check_node(source, e) for e in endpoints)))


def summarize_network(statuses: Sequence[NodeStatus]) -> NetworkStats:
    """Aggregate over responding nodes; highest block is over all nodes."""
    active = [s for s in statuses if s.is_responding]
    n = len(active)
    return NetworkStats(
        active_nodes=n,
        total_tps=sum(s.tps for s in active),
        average_gas_price=sum(s.gas_price for s in active) / n if n else 0.0,
        average_fee=sum(s.average_fee for s in active) / n if n else 0.0,
        highest_block=max((s.block_height for s in statuses), default=0),
    )


__all__ = ["MetricSource", "check_node", "collect_round", "summarize_network"]
