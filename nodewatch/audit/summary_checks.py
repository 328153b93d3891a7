"""Self-consistency checks for a single round status summary.

Unlike the cross-submission audit this looks at one summary on its own:
node coverage, plausible block heights, gas prices and peer counts, and
a recent timestamp. The score is the fraction of checks that pass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import bittensor as bt
from pydantic import ValidationError

from nodewatch.monitor.models import StatusSummary, now_ms

MIN_GAS_PRICE_GWEI = 0.1
MAX_GAS_PRICE_GWEI = 10_000
PASS_THRESHOLD = 0.7


@dataclass
class SummaryCheckResult:
    is_valid: bool
    score: float
    checks: dict[str, bool] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.is_valid


def check_status_summary(
    summary: StatusSummary | dict[str, Any] | str,
    expected_nodes: int = 3,
    now: int | None = None,
    max_age_ms: int = 3_600_000,
) -> SummaryCheckResult:
    """Score a status summary. Unparseable input scores 0 and is invalid."""
    try:
        if isinstance(summary, str):
            summary = StatusSummary.model_validate_json(summary)
        elif not isinstance(summary, StatusSummary):
            summary = StatusSummary.model_validate(summary)
    except ValidationError as e:
        bt.logging.warning({"summary_check": {"parse_error": str(e)}})
        return SummaryCheckResult(is_valid=False, score=0.0)

    now = now_ms() if now is None else now
    responding = [n for n in summary.nodes if n.is_responding]

    checks = {
        "hasAllNodes": len(summary.nodes) == expected_nodes,
        "hasActiveNodes": summary.network_stats.active_nodes > 0,
        "validBlockHeights": all(n.block_height > 0 for n in responding),
        "validGasPrices": all(
            MIN_GAS_PRICE_GWEI <= n.gas_price <= MAX_GAS_PRICE_GWEI for n in responding
        ),
        "validTimestamp": abs(now - summary.timestamp) < max_age_ms,
        "validPeerCounts": all(n.peer_count > 0 for n in responding),
    }
    score = sum(checks.values()) / len(checks)

    bt.logging.debug({"summary_check": {"checks": checks, "score": score}})
    return SummaryCheckResult(is_valid=score >= PASS_THRESHOLD, score=score, checks=checks)


__all__ = ["SummaryCheckResult", "check_status_summary"]
