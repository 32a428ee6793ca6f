"""Service configuration — environment-driven via pydantic-settings.

Settings are read from ``BLINDED_ROUTING_*`` environment variables or a
``.env`` file in the working directory.

Examples
--------
Override via environment::

    export BLINDED_ROUTING_SERVICE_ENDPOINT=https://router.example.com/didcomm
    export BLINDED_ROUTING_TRANSIENT_STORE=sqlite
    export BLINDED_ROUTING_REPLAY_POLICY=reject
"""
from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from blinded_routing.messaging.service import TXN_STORE_NAME, ReplayPolicy

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class RoutingSettings(BaseSettings):
    """Settings for one routing service process."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BLINDED_ROUTING_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Endpoint advertised in every DID document we create
    service_endpoint: str = "http://localhost:8090/didcomm"

    # Transient handshake state
    txn_store_name: str = TXN_STORE_NAME
    transient_store: Literal["memory", "sqlite"] = "memory"
    transient_store_path: Path = Path(".blinded-routing/transient.db")

    # Permanent relying-party records
    relying_party_db_path: Path = Path(".blinded-routing/relying_parties.db")

    replay_policy: ReplayPolicy = ReplayPolicy.ALLOW
    inbox_size: int = Field(default=1, ge=0)
    log_level: str = "INFO"

    @field_validator("service_endpoint")
    @classmethod
    def validate_endpoint(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("service_endpoint must not be empty.")
        return value.strip()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return level


__all__ = ["RoutingSettings"]
