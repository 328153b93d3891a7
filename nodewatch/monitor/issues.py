"""Round-over-round issue detection for a single endpoint."""

from __future__ import annotations

from pydantic import BaseModel, Field

from .models import NodeStatus


class AlertThresholds(BaseModel):
    response_time_ms: int = Field(default=3000, gt=0)
    max_transaction_cost: float = Field(default=0.1, ge=0)
    tps_drop_ratio: float = Field(default=0.5, gt=0, le=1)


def detect_issues(
    current: NodeStatus,
    previous: NodeStatus | None = None,
    thresholds: AlertThresholds | None = None,
) -> list[str]:
    """Describe anything wrong with ``current``, comparing to ``previous``."""
    thresholds = thresholds or AlertThresholds()
    issues: list[str] = []

    if current.response_time > thresholds.response_time_ms:
        issues.append(f"High response time: {current.response_time}ms")

    if previous is not None and current.is_responding:
        if current.block_height == previous.block_height:
            issues.append("Blocks not advancing")
        if current.average_fee > thresholds.max_transaction_cost:
            issues.append(f"High transaction fees: {current.average_fee:.4f}")
        if previous.tps > 0 and current.tps < previous.tps * thresholds.tps_drop_ratio:
            drop = round((1 - thresholds.tps_drop_ratio) * 100)
            issues.append(f"TPS dropped by >{drop}%: {current.tps:.2f} TPS")

    if current.health != "healthy":
        issues.append(f"Node health: {current.health}")

    return issues


__all__ = ["AlertThresholds", "detect_issues"]
