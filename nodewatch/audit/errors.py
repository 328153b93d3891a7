"""Audit error types.

Only ``NoValidSubmissionsError`` is ever raised to callers. Malformed and
out-of-window submissions are filtered, and a node report nobody else
corroborates simply counts as invalid; their names exist as partition
labels (see ``partition.py``).
"""

from __future__ import annotations


MALFORMED_SUBMISSION = "MalformedSubmission"
OUT_OF_WINDOW_SUBMISSION = "OutOfWindowSubmission"
UNVALIDATABLE_NODE_REPORT = "UnvalidatableNodeReport"


class NoValidSubmissionsError(Exception):
    """No submission survived filtering for a round.

    The round is unauditable and must not be paid out.
    """

    def __init__(self, round: int):
        self.round = round
        super().__init__(f"No valid submissions found for round {round}")


__all__ = [
    "MALFORMED_SUBMISSION",
    "NoValidSubmissionsError",
    "OUT_OF_WINDOW_SUBMISSION",
    "UNVALIDATABLE_NODE_REPORT",
]
