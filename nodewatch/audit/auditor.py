"""Cross-submission audit.

Each submitter's node reports are checked against the median of the same
endpoint's reports from every *other* submitter in the round. A
submitter's score is the share of its reports that agree with peer
consensus, scaled to 100.

Pure and synchronous: no I/O beyond asking the host clock for the round
duration.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import bittensor as bt

from nodewatch.config import AuditSettings

from .errors import NoValidSubmissionsError
from .models import AuditResult, NodeMetricReport, Submission
from .partition import partition_submissions
from .stats import median, within_tolerance


@runtime_checkable
class RoundClock(Protocol):
    """Host collaborator that knows how long a round lasts."""

    def get_round_time(self) -> int:
        """Round duration in milliseconds."""
        ...


@dataclass
class NodeCheck:
    """Verdict for a single node report."""

    endpoint: str
    valid: bool
    peer_count: int
    median_block_height: float | None = None
    median_tps: float | None = None


def peer_reports(
    endpoint: str,
    submissions: Sequence[Submission],
    exclude_index: int,
) -> list[NodeMetricReport]:
    """Reports for ``endpoint`` from every submission except ``exclude_index``."""
    peers: list[NodeMetricReport] = []
    for i, submission in enumerate(submissions):
        if i == exclude_index:
            continue
        report = submission.node_for(endpoint)
        if report is not None:
            peers.append(report)
    return peers


def check_node_report(
    report: NodeMetricReport,
    peers: Sequence[NodeMetricReport],
    settings: AuditSettings | None = None,
) -> NodeCheck:
    """Compare one report to the peer medians.

    A report with no peers cannot be corroborated and is invalid. A zero
    median block height leaves a band of exactly {0}.
    """
    settings = settings or AuditSettings()
    if not peers:
        return NodeCheck(endpoint=report.endpoint, valid=False, peer_count=0)

    median_height = median([p.block_height for p in peers])
    median_tps = median([p.tps for p in peers])

    height_ok = within_tolerance(
        report.block_height,
        median_height,
        settings.block_height_tolerance * median_height,
    )
    tps_ok = within_tolerance(
        report.tps,
        median_tps,
        max(settings.tps_tolerance * median_tps, settings.min_tps_tolerance),
    )

    return NodeCheck(
        endpoint=report.endpoint,
        valid=height_ok and tps_ok,
        peer_count=len(peers),
        median_block_height=median_height,
        median_tps=median_tps,
    )


def score_submission(checks: Sequence[NodeCheck]) -> float:
    """100 * valid / total, or 0 for a submission with no node reports."""
    if not checks:
        return 0.0
    return 100.0 * sum(1 for c in checks if c.valid) / len(checks)


class SubmissionAuditor:
    """Scores every submitter in a round against peer consensus."""

    def __init__(self, clock: RoundClock, settings: AuditSettings | None = None):
        self.clock = clock
        self.settings = settings or AuditSettings()

    def check_submissions(
        self, submissions: Sequence[Submission],
    ) -> list[list[NodeCheck]]:
        """Per-node verdicts for each accepted submission, in order."""
        return [
            [
                check_node_report(
                    node,
                    peer_reports(node.endpoint, submissions, exclude_index=i),
                    self.settings,
                )
                for node in submission.nodes
            ]
            for i, submission in enumerate(submissions)
        ]

    def audit(self, submissions: Sequence[Any], round: int) -> list[AuditResult]:
        """Audit one round's submissions.

        Raises:
            NoValidSubmissionsError: if nothing survives structural and
                time-window filtering.
        """
        partition = partition_submissions(
            submissions, round, self.clock.get_round_time(),
        )
        accepted = partition.accepted
        if not accepted:
            bt.logging.warning({
                "audit": {"round": round, "status": "no_valid_submissions",
                          "rejected": len(partition.rejected)}
            })
            raise NoValidSubmissionsError(round)

        results = [
            AuditResult(submitter=submission.submitter, score=score_submission(checks))
            for submission, checks in zip(accepted, self.check_submissions(accepted))
        ]

        bt.logging.info({
            "audit": {
                "round": round,
                "accepted": len(accepted),
                "rejected": len(partition.rejected),
                "mean_score": sum(r.score for r in results) / len(results),
            }
        })
        return results


__all__ = [
    "NodeCheck",
    "RoundClock",
    "SubmissionAuditor",
    "check_node_report",
    "peer_reports",
    "score_submission",
]
