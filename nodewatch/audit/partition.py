"""Validate-and-partition stage of the round audit.

Splits a raw batch into accepted, malformed and out-of-window entries so
that silently dropped input is still observable and testable.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import bittensor as bt
from pydantic import ValidationError

from .errors import MALFORMED_SUBMISSION, OUT_OF_WINDOW_SUBMISSION
from .models import Submission


@dataclass
class RejectedSubmission:
    """An input entry that did not make it past the structural filter."""

    index: int
    reason: str  # MALFORMED_SUBMISSION or OUT_OF_WINDOW_SUBMISSION
    detail: str = ""


@dataclass
class SubmissionPartition:
    """Result of filtering one round's submissions."""

    accepted: list[Submission] = field(default_factory=list)
    rejected: list[RejectedSubmission] = field(default_factory=list)

    @property
    def malformed(self) -> list[RejectedSubmission]:
        return [r for r in self.rejected if r.reason == MALFORMED_SUBMISSION]

    @property
    def out_of_window(self) -> list[RejectedSubmission]:
        return [r for r in self.rejected if r.reason == OUT_OF_WINDOW_SUBMISSION]


def round_window(round: int, round_time_ms: int) -> tuple[int, int]:
    """Half-open ``[start, end)`` millisecond window for a round."""
    return round * round_time_ms, (round + 1) * round_time_ms


def coerce_submission(raw: Any) -> Submission:
    """Return ``raw`` as a Submission, validating plain mappings.

    Raises:
        ValidationError: if ``raw`` is not a well-formed submission.
        TypeError: if ``raw`` is neither a Submission nor a mapping.
    """
    if isinstance(raw, Submission):
        return raw
    if not isinstance(raw, dict):
        raise TypeError(f"expected a mapping, got {type(raw).__name__}")
    return Submission.model_validate(raw)


def partition_submissions(
    submissions: Sequence[Any],
    round: int,
    round_time_ms: int,
) -> SubmissionPartition:
    """Structural and time-window filter, preserving input order."""
    start, end = round_window(round, round_time_ms)
    partition = SubmissionPartition()

    for index, raw in enumerate(submissions):
        try:
            submission = coerce_submission(raw)
        except (ValidationError, TypeError) as e:
            partition.rejected.append(RejectedSubmission(
                index=index, reason=MALFORMED_SUBMISSION, detail=str(e),
            ))
            continue

        if not start <= submission.timestamp < end:
            partition.rejected.append(RejectedSubmission(
                index=index,
                reason=OUT_OF_WINDOW_SUBMISSION,
                detail=f"timestamp {submission.timestamp} outside [{start}, {end})",
            ))
            continue

        partition.accepted.append(submission)

    if partition.rejected:
        bt.logging.debug({
            "audit_partition": {
                "round": round,
                "accepted": len(partition.accepted),
                "malformed": len(partition.malformed),
                "out_of_window": len(partition.out_of_window),
            }
        })

    return partition


__all__ = [
    "RejectedSubmission",
    "SubmissionPartition",
    "coerce_submission",
    "partition_submissions",
    "round_window",
]
