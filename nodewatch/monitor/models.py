"""Pydantic models for collector output.

Two shapes:
- NodeStatus: what one endpoint reported this round (or the offline sentinel)
- StatusSummary: a round's node list plus network-wide aggregates
"""

from __future__ import annotations

import time

from pydantic import BaseModel, ConfigDict, Field


def now_ms() -> int:
    return int(time.time() * 1000)


# ---------------------------------------------------------------------------
# Per-endpoint status
# ---------------------------------------------------------------------------


class NodeStatus(BaseModel):
    """Metrics observed for one endpoint in one round.

    A failed collection is represented by the sentinel from ``offline()``;
    consumers must treat it as absent data, not as zero-valued metrics.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    endpoint: str
    is_responding: bool = Field(alias="isResponding")
    block_height: int = Field(default=0, alias="blockHeight")
    response_time: int = Field(default=-1, alias="responseTime")
    timestamp: int = 0
    tps: float = 0.0
    health: str = "offline"
    peer_count: int = Field(default=0, alias="peerCount")
    gas_price: float = Field(default=0.0, alias="gasPrice", description="gwei")
    average_fee: float = Field(default=0.0, alias="averageFee")
    version: str = "unknown"
    error: str | None = None

    @classmethod
    def offline(cls, endpoint: str, error: str | None = None) -> NodeStatus:
        """Sentinel for an endpoint whose collection failed."""
        return cls(endpoint=endpoint, is_responding=False, error=error)


# ---------------------------------------------------------------------------
# Round summary
# ---------------------------------------------------------------------------


class NetworkStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    active_nodes: int = Field(alias="activeNodes")
    total_tps: float = Field(default=0.0, alias="totalTps")
    average_gas_price: float = Field(default=0.0, alias="averageGasPrice")
    average_fee: float = Field(default=0.0, alias="averageFee")
    highest_block: int = Field(default=0, alias="highestBlock")


class StatusSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    timestamp: int
    round_number: int = Field(alias="roundNumber")
    nodes: list[NodeStatus] = Field(default_factory=list)
    network_stats: NetworkStats = Field(alias="networkStats")


__all__ = ["NetworkStats", "NodeStatus", "StatusSummary", "now_ms"]
