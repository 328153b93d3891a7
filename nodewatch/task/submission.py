"""Submission step: verify the stored round payload and hand it to the host."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import bittensor as bt
from pydantic import ValidationError

from nodewatch.audit.models import Submission
from nodewatch.monitor.models import now_ms

from .namespace import Namespace, status_key

MAX_SUBMISSION_AGE_MS = 3_600_000


class SubmissionError(Exception):
    """The stored payload for a round is missing or failed verification."""

    def __init__(self, round: int, errors: list[str]):
        self.round = round
        self.errors = errors
        super().__init__(f"Submission for round {round} rejected: {'; '.join(errors)}")


@dataclass
class VerificationResult:
    """Outcome of payload verification."""

    valid: bool
    errors: list[str]
    submission: Submission | None = None

    def __bool__(self) -> bool:
        return self.valid


def verify_submission(
    payload: Any,
    now: int | None = None,
    max_age_ms: int = MAX_SUBMISSION_AGE_MS,
) -> VerificationResult:
    """Check structure, score range and freshness of a payload.

    ``payload`` may be a JSON string, a mapping or a Submission.
    """
    errors: list[str] = []
    try:
        if isinstance(payload, Submission):
            submission = payload
        elif isinstance(payload, (str, bytes)):
            submission = Submission.model_validate_json(payload)
        else:
            submission = Submission.model_validate(payload)
    except ValidationError as e:
        for err in e.errors():
            loc = ".".join(str(p) for p in err["loc"])
            errors.append(f"{loc}: {err['msg']}" if loc else err["msg"])
        return VerificationResult(valid=False, errors=errors)

    now = now_ms() if now is None else now
    if submission.timestamp > now:
        errors.append(f"timestamp {submission.timestamp} is in the future")
    elif submission.timestamp < now - max_age_ms:
        errors.append(f"timestamp {submission.timestamp} is older than {max_age_ms}ms")

    return VerificationResult(valid=not errors, errors=errors, submission=submission)


class SubmissionTask:
    """Loads, verifies and submits this node's payload for a round."""

    def __init__(self, namespace: Namespace):
        self.namespace = namespace

    async def submit(self, round: int, now: int | None = None) -> Submission:
        """Submit the stored payload for ``round``.

        Raises:
            SubmissionError: if no payload is stored or it fails verification.
        """
        raw = await self.namespace.store_get(status_key(round))
        if raw is None:
            bt.logging.error({"submission": {"round": round, "error": "no_results"}})
            raise SubmissionError(round, ["no stored results"])

        result = verify_submission(raw, now=now)
        if not result:
            bt.logging.error({"submission": {"round": round, "errors": result.errors}})
            raise SubmissionError(round, result.errors)

        if result.submission.round != round:
            errors = [f"stored payload is for round {result.submission.round}"]
            bt.logging.error({"submission": {"round": round, "errors": errors}})
            raise SubmissionError(round, errors)

        await self.namespace.submit_task(round, result.submission.to_payload())
        bt.logging.info({"submission": {"round": round, "status": "submitted"}})
        return result.submission


__all__ = [
    "MAX_SUBMISSION_AGE_MS",
    "SubmissionError",
    "SubmissionTask",
    "VerificationResult",
    "verify_submission",
]
