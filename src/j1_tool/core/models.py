"""Query and result models for j1-tool.

Pydantic models for the deferred query pipeline: the normalized query,
the deferred job handle, per-poll snapshots, the page accumulator and
the envelopes handed back to callers.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

Record = dict[str, Any]


class JobStatus(StrEnum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class QuerySpec(BaseModel):
    """A normalized J1QL query with its effective row cap."""

    model_config = ConfigDict(frozen=True)

    text: str
    cap: int = Field(ge=1)


class DeferredJob(BaseModel):
    """Handle to a query running in the background on the server.

    submitted_at is a reading of the client's monotonic clock.
    """

    model_config = ConfigDict(frozen=True)

    result_url: str
    submitted_at: float


class JobResult(BaseModel):
    """Snapshot of a deferred job as reported by one poll response."""

    status: str = JobStatus.IN_PROGRESS
    rows: list[Any] = []
    cursor: str | None = None
    error: str | None = None


class Accumulator(BaseModel):
    """Rows collected across pages of one query."""

    rows: list[Any] = []
    cursor: str | None = None
    cap: int
    pages: int = 0

    @property
    def full(self) -> bool:
        return len(self.rows) >= self.cap


class ResultEnvelope(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: str
    rows: list[Any]
    cap: int
    generated_at: datetime = Field(alias="generatedAt")

    @property
    def row_count(self) -> int:
        return len(self.rows)


class FailureRecord(BaseModel):
    """Returned in place of an envelope when continue-on-failure is active."""

    query: str
    error: str
    error_type: str = Field(alias="errorType")
    timestamp: datetime

    model_config = ConfigDict(populate_by_name=True)


class WebhookResponse(BaseModel):
    status_code: int
    body: dict[str, Any]
    alert: Record | None = None
