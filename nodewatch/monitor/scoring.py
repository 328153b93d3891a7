"""Per-node health scoring.

Each metric maps to a 0-100 band score through fixed thresholds; the node
score is the weighted sum, rounded. Block-height progress is measured
against the previous round's height for the same endpoint, which the
caller passes in explicitly.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from pydantic import BaseModel, Field

from .models import NodeStatus


class ScoringWeights(BaseModel):
    response_time: float = 0.2
    block_height: float = 0.25
    tps: float = 0.2
    health: float = 0.2
    peers: float = 0.15

    def as_dict(self) -> dict[str, float]:
        return self.model_dump()


class ResponseTimeBands(BaseModel):
    """Upper bounds in ms (exclusive)."""

    excellent: int = 1000
    good: int = 2000
    fair: int = 3000
    poor: int = 5000


class TpsBands(BaseModel):
    """Lower bounds in TPS (exclusive)."""

    excellent: float = 50
    good: float = 30
    fair: float = 10
    poor: float = 1


class ScoringConfig(BaseModel):
    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    response_time: ResponseTimeBands = Field(default_factory=ResponseTimeBands)
    tps: TpsBands = Field(default_factory=TpsBands)
    min_peers: int = 3


@dataclass
class NodeScore:
    """Scored node with per-metric breakdown."""

    endpoint: str
    scores: dict[str, int] = field(default_factory=dict)
    weighted: float = 0.0
    score: int = 0
    issues: list[str] = field(default_factory=list)


def _response_time_score(value: float, bands: ResponseTimeBands) -> int:
    if value < bands.excellent:
        return 100
    if value < bands.good:
        return 80
    if value < bands.fair:
        return 60
    if value < bands.poor:
        return 40
    return 20


def _tps_score(value: float, bands: TpsBands) -> int:
    if value > bands.excellent:
        return 100
    if value > bands.good:
        return 80
    if value > bands.fair:
        return 60
    if value > bands.poor:
        return 40
    return 20


def _block_height_score(value: int, previous: int | None) -> int:
    if not previous:
        return 80
    diff = value - previous
    if diff <= 0:
        return 40  # stalled or went backwards
    if diff < 5:
        return 60
    if diff < 10:
        return 80
    return 100


def _peers_score(value: int, min_peers: int) -> int:
    if value >= min_peers * 2:
        return 100
    if value >= min_peers:
        return 80
    if value >= min_peers / 2:
        return 50
    return 20


def metric_score(
    metric: str,
    value,
    previous_block_height: int | None = None,
    config: ScoringConfig | None = None,
) -> int:
    """Band score for one metric. Unknown metrics score 0."""
    config = config or ScoringConfig()
    if metric == "response_time":
        return _response_time_score(value, config.response_time)
    if metric == "tps":
        return _tps_score(value, config.tps)
    if metric == "health":
        return 100 if value == "healthy" else 0
    if metric == "block_height":
        return _block_height_score(value, previous_block_height)
    if metric == "peers":
        return _peers_score(value, config.min_peers)
    return 0


def score_node(
    status: NodeStatus,
    previous_block_height: int | None = None,
    config: ScoringConfig | None = None,
) -> NodeScore:
    """Weighted health score for one endpoint.

    The offline sentinel carries no real metrics, so it scores 0.
    """
    config = config or ScoringConfig()
    if not status.is_responding:
        return NodeScore(
            endpoint=status.endpoint,
            issues=[f"Node not responding: {status.error or 'unknown error'}"],
        )

    scores = {
        "response_time": metric_score("response_time", status.response_time, config=config),
        "block_height": metric_score(
            "block_height", status.block_height, previous_block_height, config,
        ),
        "tps": metric_score("tps", status.tps, config=config),
        "health": metric_score("health", status.health, config=config),
        "peers": metric_score("peers", status.peer_count, config=config),
    }
    weights = config.weights.as_dict()
    weighted = sum(scores[m] * weights[m] for m in scores)

    issues: list[str] = []
    if scores["response_time"] < 60:
        issues.append(f"High response time: {status.response_time}ms")
    if scores["block_height"] < 60:
        issues.append("Block height not advancing normally")
    if scores["tps"] < 60:
        issues.append(f"Low TPS: {status.tps:.2f}")
    if scores["health"] < 100:
        issues.append("Node health issues detected")
    if scores["peers"] < 60:
        issues.append(f"Low peer count: {status.peer_count}")

    return NodeScore(
        endpoint=status.endpoint,
        scores=scores,
        weighted=weighted,
        score=round(weighted),
        issues=issues,
    )


def next_previous(statuses: list[NodeStatus]) -> dict[str, int]:
    """Block heights to thread into the next round (responding nodes only)."""
    return {s.endpoint: s.block_height for s in statuses if s.is_responding}


def previous_height(previous: Mapping[str, int] | None, endpoint: str) -> int | None:
    if previous is None:
        return None
    return previous.get(endpoint)


__all__ = [
    "NodeScore",
    "ResponseTimeBands",
    "ScoringConfig",
    "ScoringWeights",
    "TpsBands",
    "metric_score",
    "next_previous",
    "previous_height",
    "score_node",
]
