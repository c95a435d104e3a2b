from dataclasses import dataclass, field
from typing import Any

STATUS_RUNNING = "running"
STATUS_UPLOADING = "uploading"
STATUS_DONE = "done"
STATUS_FAILED = "failed"

TERMINAL_STATUSES = frozenset({STATUS_DONE, STATUS_FAILED})

MetricSet = dict[str, float | int]


@dataclass(frozen=True)
class Job:
    """One page test decoded from the inbound queue."""

    id: str
    url: str
    browser: str | None = None
    connection: str | None = None
    page_limit: int = 1
    iteration_count: int = 1
    depth: int = 0
    base_path: str = ""
    submitted_at: Any = None

    @property
    def output_path(self) -> str:
        """Relative path shared by the local result tree and the storage prefix."""
        base = self.base_path.strip("/")
        return f"{base}/{self.id}" if base else self.id


@dataclass(frozen=True)
class StatusMessage:
    """Progress record published on the result queue."""

    id: str
    status: str
    metrics: MetricSet = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def to_payload(self) -> dict[str, Any]:
        """Flatten into the wire shape: {id, status, ...metrics, warnings?}."""
        payload: dict[str, Any] = {"id": self.id, "status": self.status}
        if self.status == STATUS_DONE:
            payload.update(self.metrics)
            if self.warnings:
                payload["warnings"] = list(self.warnings)
        return payload
