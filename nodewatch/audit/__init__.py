"""Cross-submission audit.

Scores each submitter in a round by how well its node reports agree with
the median of everyone else's reports for the same endpoints.
"""

from .auditor import SubmissionAuditor, check_node_report, peer_reports, score_submission
from .errors import NoValidSubmissionsError
from .models import AuditResult, NodeMetricReport, Submission
from .partition import SubmissionPartition, partition_submissions
from .stats import median

__all__ = [
    "AuditResult",
    "NoValidSubmissionsError",
    "NodeMetricReport",
    "Submission",
    "SubmissionAuditor",
    "SubmissionPartition",
    "check_node_report",
    "median",
    "partition_submissions",
    "peer_reports",
    "score_submission",
]
