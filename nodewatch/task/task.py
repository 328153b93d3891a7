"""Round task: collect, score, and store this node's submission payload."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

import bittensor as bt

from nodewatch.audit.models import NodeMetricReport, Submission
from nodewatch.monitor.collector import MetricSource, collect_round
from nodewatch.monitor.models import NodeStatus, now_ms
from nodewatch.monitor.scoring import (
    NodeScore,
    ScoringConfig,
    next_previous,
    previous_height,
    score_node,
)

from .namespace import Namespace, status_key

if TYPE_CHECKING:
    from nodewatch.config import Settings


def build_submission(
    statuses: Sequence[NodeStatus],
    scores: Sequence[NodeScore],
    round: int,
    submitter: str,
    timestamp: int,
) -> Submission:
    """Assemble a Submission.

    Offline endpoints carry no usable metrics, so they are listed in
    ``offline_endpoints`` instead of ``nodes``; they still count toward the
    network score with a node score of 0.
    """
    nodes = [
        NodeMetricReport(
            endpoint=status.endpoint,
            block_height=status.block_height,
            tps=float(status.tps),
            health=status.health,
            response_time=status.response_time,
            score=float(score.score),
            issues=tuple(score.issues),
        )
        for status, score in zip(statuses, scores)
        if status.is_responding
    ]
    network_score = sum(s.score for s in scores) / len(scores) if scores else 0.0

    return Submission(
        submitter=submitter,
        round=round,
        timestamp=timestamp,
        nodes=tuple(nodes),
        network_score=float(network_score),
        offline_endpoints=tuple(s.endpoint for s in statuses if not s.is_responding),
    )


class MonitorTask:
    """Runs one monitoring round on behalf of a submitter."""

    def __init__(
        self,
        namespace: Namespace,
        source: MetricSource,
        endpoints: Sequence[str],
        submitter: str,
        scoring: ScoringConfig | None = None,
    ):
        self.namespace = namespace
        self.source = source
        self.endpoints = list(endpoints)
        self.submitter = submitter
        self.scoring = scoring or ScoringConfig()

    @classmethod
    def from_settings(
        cls, settings: Settings, namespace: Namespace, source: MetricSource,
    ) -> MonitorTask:
        return cls(
            namespace,
            source,
            settings.monitored_endpoints(),
            submitter=settings.submitter,
            scoring=settings.scoring,
        )

    async def task(
        self,
        round: int,
        previous: Mapping[str, int] | None = None,
        timestamp: int | None = None,
    ) -> tuple[Submission, dict[str, int]]:
        """Collect and store a round's submission.

        Args:
            round: Round number.
            previous: Block height per endpoint from the prior round.
            timestamp: Submission time in ms (defaults to now).

        Returns:
            (submission, block heights to pass as ``previous`` next round).
        """
        bt.logging.info({"monitor_task": {"round": round, "endpoints": len(self.endpoints)}})

        statuses = await collect_round(self.source, self.endpoints)
        scores = [
            score_node(s, previous_height(previous, s.endpoint), self.scoring)
            for s in statuses
        ]
        submission = build_submission(
            statuses, scores, round, self.submitter,
            now_ms() if timestamp is None else timestamp,
        )

        await self.namespace.store_set(status_key(round), json.dumps(submission.to_payload()))

        bt.logging.info({
            "monitor_task": {
                "round": round,
                "network_score": f"{submission.network_score:.2f}",
                "responding": len(submission.nodes),
                "offline": list(submission.offline_endpoints),
            }
        })
        return submission, next_previous(statuses)


__all__ = ["MonitorTask", "build_submission"]
