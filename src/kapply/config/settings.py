"""Typed settings for the reconciler and cluster backends."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator

MAX_WORKERS = 8


class BackendType(str, Enum):
    """Cluster API backend."""
    HTTP = "http"
    STATE_FILE = "state-file"


class ClusterSettings(BaseModel):
    """Where the cluster API lives and how to authenticate."""
    backend: BackendType = Field(BackendType.HTTP, description="http or state-file")
    endpoint: Optional[str] = Field(None, description="Cluster API base URL")
    token: Optional[str] = Field(None, description="Bearer token for the cluster API", repr=False)
    credentials_file: Optional[str] = Field(None, description="YAML file holding endpoint/token")
    state_file: str = Field(".kapply/state.json", description="Local state file for the state-file backend")
    verify_tls: bool = Field(True, description="Verify TLS certificates")


class RetrySettings(BaseModel):
    """Bounded exponential backoff for transient API failures."""
    attempts: int = Field(3, ge=1, description="Total attempts per call")
    base_delay: float = Field(0.5, ge=0, description="First backoff delay in seconds")
    max_delay: float = Field(4.0, ge=0, description="Cap on a single backoff delay")


class ApiSettings(BaseModel):
    timeout: float = Field(10.0, gt=0, description="Per-call timeout in seconds")


class ConcurrencySettings(BaseModel):
    workers: int = Field(1, ge=1, description="Parallel apply workers (1 = sequential)")

    @field_validator("workers")
    @classmethod
    def cap_workers(cls, value: int) -> int:
        return min(value, MAX_WORKERS)


class KapplySettings(BaseModel):
    """Complete kapply configuration."""
    cluster: ClusterSettings = Field(default_factory=ClusterSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    concurrency: ConcurrencySettings = Field(default_factory=ConcurrencySettings)
