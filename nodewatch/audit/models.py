"""Pydantic models for round submissions and audit output.

Submissions arrive as already-deserialized values (dicts or model
instances). Field names on the wire are camelCase; Python attributes are
snake_case. All models are frozen so the auditor can never mutate input.
"""

from __future__ import annotations

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    model_validator,
)


class NodeMetricReport(BaseModel):
    """One endpoint's observed metrics as reported by one submitter."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    endpoint: StrictStr = Field(min_length=1)
    block_height: StrictInt = Field(alias="blockHeight", ge=0)
    tps: StrictFloat = Field(ge=0, allow_inf_nan=False)
    health: StrictStr
    response_time: StrictInt = Field(alias="responseTime", ge=0)
    score: float | None = Field(default=None, ge=0, le=100, allow_inf_nan=False)
    issues: tuple[str, ...] = ()


class Submission(BaseModel):
    """One submitter's full report for one round."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    submitter: StrictStr
    round: StrictInt = Field(ge=0)
    timestamp: StrictInt = Field(description="Milliseconds since epoch")
    nodes: tuple[NodeMetricReport, ...]
    network_score: StrictFloat = Field(alias="networkScore", ge=0, le=100, allow_inf_nan=False)
    offline_endpoints: tuple[str, ...] = Field(default=(), alias="offlineEndpoints")

    @model_validator(mode="after")
    def _unique_endpoints(self) -> Submission:
        seen: set[str] = set()
        for node in self.nodes:
            if node.endpoint in seen:
                raise ValueError(f"duplicate endpoint in submission: {node.endpoint}")
            seen.add(node.endpoint)
        return self

    def node_for(self, endpoint: str) -> NodeMetricReport | None:
        """Return this submission's report for an endpoint, if any."""
        return next((n for n in self.nodes if n.endpoint == endpoint), None)

    def to_payload(self) -> dict:
        """Serialize to the camelCase wire shape."""
        return self.model_dump(mode="json", by_alias=True)


class AuditResult(BaseModel):
    """Trust score for one submitter in a round."""

    model_config = ConfigDict(frozen=True)

    submitter: str
    score: float = Field(ge=0, le=100)


__all__ = ["AuditResult", "NodeMetricReport", "Submission"]
