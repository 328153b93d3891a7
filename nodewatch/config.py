"""Runtime settings.

Values come from ``NODEWATCH__``-prefixed environment variables, with
``__`` separating nested sections, e.g.::

    NODEWATCH__ROUND_TIME_MS=600000
    NODEWATCH__AUDIT__BLOCK_HEIGHT_TOLERANCE=0.05
    NODEWATCH__MONITOR__POLL_INTERVAL_SECONDS=15
    NODEWATCH__ENDPOINTS=https://k2.koii.live,https://k2-testnet.koii.live

A ``.env`` file is read too unless ``NODEWATCH_TEST_MODE=true``.
Environment values win over keyword overrides, so CLI flags only fill in
what the environment leaves unset.
"""

from __future__ import annotations

import os
from typing import Annotated, Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from nodewatch.monitor.issues import AlertThresholds
from nodewatch.monitor.networks import nodes_for_network
from nodewatch.monitor.scoring import ScoringConfig


class AuditSettings(BaseModel):
    """Peer-consensus tolerances for the cross-submission audit."""

    block_height_tolerance: float = Field(default=0.05, ge=0)
    tps_tolerance: float = Field(default=0.05, ge=0)
    min_tps_tolerance: float = Field(default=1.0, ge=0)


class MonitorSettings(BaseModel):
    poll_interval_seconds: int = Field(default=30, gt=0)
    alerts: AlertThresholds = Field(default_factory=AlertThresholds)


class Settings(BaseSettings):
    round_time_ms: int = Field(default=600_000, gt=0)
    data_dir: str = "nodewatch/data"
    network: str = Field(default="mainnet", description="Endpoint set used when endpoints is empty.")
    endpoints: Annotated[list[str], NoDecode] = Field(default_factory=list)
    submitter: str = "local"
    audit: AuditSettings = Field(default_factory=AuditSettings)
    monitor: MonitorSettings = Field(default_factory=MonitorSettings)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)

    model_config = SettingsConfigDict(
        env_prefix="NODEWATCH__",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings,
    ):
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @field_validator("endpoints", mode="before")
    @classmethod
    def _split_endpoints(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [e.strip() for e in v.split(",") if e.strip()]
        return v

    def monitored_endpoints(self) -> list[str]:
        """Explicit endpoints if configured, else the network's default set."""
        return list(self.endpoints) or nodes_for_network(self.network)


def load_settings(**overrides: Any) -> Settings:
    """Build Settings from the environment (and ``.env`` outside tests).

    ``None`` overrides are dropped so unset CLI flags fall through to the
    defaults.
    """
    values = {k: v for k, v in overrides.items() if v is not None}
    if os.environ.get("NODEWATCH_TEST_MODE") == "true":
        return Settings(_env_file=None, **values)
    return Settings(**values)


__all__ = [
    "AuditSettings",
    "MonitorSettings",
    "Settings",
    "load_settings",
]
