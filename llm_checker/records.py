"""Data model for discovered models, log events and dashboard stats."""

from datetime import UTC, date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(UTC)


class LogLevel(str, Enum):
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    SUCCESS = "SUCCESS"


class LogModule(str, Enum):
    CHECKER = "CHECKER"
    DB = "DB"
    API = "API"
    SYSTEM = "SYSTEM"


class Status(str, Enum):
    IDLE = "IDLE"
    POLLING = "POLLING"
    ERROR = "ERROR"


class ModelRecord(BaseModel):
    """Canonical record for one discovered model."""

    name: str
    provider: str
    parameters: str = Field("Unknown", description="Size label, e.g. 7B, 8X7B or Unknown")
    description: str = ""
    likes: int = Field(0, ge=0)
    downloads: int = Field(0, ge=0)
    tags: list[str] = Field(default_factory=list)
    license: str = "other"
    vram_size: str = Field("Unknown", description="Estimated FP16 inference VRAM, e.g. 17GB")
    release_date: date
    last_updated: datetime = Field(default_factory=utcnow)

    @property
    def id(self) -> str:
        """Identity key, stable across merges."""
        return f"{self.provider}/{self.name}"


class LogEvent(BaseModel):
    """One entry of the activity trail. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: datetime = Field(default_factory=utcnow)
    level: LogLevel
    module: LogModule
    message: str


class StatsSnapshot(BaseModel):
    """Dashboard statistics. Replaced, never mutated, between cycles."""

    model_config = ConfigDict(frozen=True)

    total_models: int = 0
    last_check: datetime = Field(default_factory=utcnow)
    status: Status = Status.IDLE
    db_size: str = "0.0 MB"
    api_requests: int = 0
    current_activity: str = "System Idle"
