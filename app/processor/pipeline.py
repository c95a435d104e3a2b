from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from app.jobs.models import Job, MetricSet
from app.metrics.classifier import Classification


@dataclass(slots=True)
class PipelineContext:
    job: Job
    output_dir: Path
    metrics: MetricSet = field(default_factory=dict)
    classification: Classification | None = None
    report_data: dict[str, Any] = field(default_factory=dict)
    archive_path: Path | None = None
    warnings: list[str] = field(default_factory=list)
    error_message: str = ""


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
