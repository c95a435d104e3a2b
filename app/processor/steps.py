import os
import shutil
from pathlib import Path
from typing import Any

from app.artifacts.packager import WORKING_FILES, ArtifactPackager
from app.jobs.models import (
    STATUS_DONE,
    STATUS_FAILED,
    StatusMessage,
)
from app.logging.logger import Log
from app.measurement.base import BaseMeasurementRunner
from app.measurement.models import MeasurementConfig
from app.measurement.prerequisite import RuntimePrerequisite
from app.metrics.classifier import classify
from app.metrics.extractor import MetricExtractor, load_summary
from app.processor.exceptions import OutputPathError, ResultPageError
from app.processor.pipeline import PipelineContext, PipelineStep
from app.report.generator import ReportGenerator
from app.storage.base import BaseStorage
from app.worker.status import StatusPublisher

RESULT_PAGE = "index.html"
RAW_RESULT_PAGE = "index2.html"
SUMMARY_FILE = Path("data") / "summary.json"


class ReportStatusStep(PipelineStep):
    """Emits an intermediate status. Best-effort: never fails the pipeline."""

    def __init__(self, publisher: StatusPublisher, status: str) -> None:
        self._publisher = publisher
        self._status = status

    def run(self, context: PipelineContext) -> PipelineContext:
        self._publisher.publish(StatusMessage(id=context.job.id, status=self._status))
        return context


class ReportDoneStep(PipelineStep):
    def __init__(self, publisher: StatusPublisher) -> None:
        self._publisher = publisher

    def run(self, context: PipelineContext) -> PipelineContext:
        self._publisher.publish(
            StatusMessage(
                id=context.job.id,
                status=STATUS_DONE,
                metrics=dict(context.metrics),
                warnings=list(context.warnings),
            )
        )
        Log.info(f"Job {context.job.id} done")
        return context


class ReportFailedStep(PipelineStep):
    def __init__(self, publisher: StatusPublisher) -> None:
        self._publisher = publisher

    def run(self, context: PipelineContext) -> PipelineContext:
        self._publisher.publish(StatusMessage(id=context.job.id, status=STATUS_FAILED))
        Log.error(f"Job {context.job.id} marked as failed: {context.error_message}")
        return context


class RunMeasurementStep(PipelineStep):
    def __init__(
        self,
        runner: BaseMeasurementRunner,
        prerequisite: RuntimePrerequisite,
        data_dir: Path,
        result_root: Path,
    ) -> None:
        self._runner = runner
        self._prerequisite = prerequisite
        self._data_dir = data_dir
        self._result_root = result_root

    def run(self, context: PipelineContext) -> PipelineContext:
        self._check_output_dir(context.output_dir)
        self._prerequisite.ensure_ready()
        if context.output_dir.exists():
            # leftovers of an earlier delivery of the same job
            shutil.rmtree(context.output_dir)
        config = MeasurementConfig.for_job(context.job, self._data_dir)
        Log.info(f"Starting measurement of {config.url} for job {context.job.id}")
        self._runner.run(config)
        return context

    def _check_output_dir(self, output_dir: Path) -> None:
        root = self._result_root.resolve()
        resolved = output_dir.resolve()
        if resolved == root or not resolved.is_relative_to(root):
            raise OutputPathError(f"Output directory {output_dir} is outside {root}")


class ExtractMetricsStep(PipelineStep):
    def __init__(self, extractor: MetricExtractor) -> None:
        self._extractor = extractor

    def run(self, context: PipelineContext) -> PipelineContext:
        summary = load_summary(context.output_dir / SUMMARY_FILE)
        context.metrics = self._extractor.extract(summary)
        Log.info(f"Extracted {len(context.metrics)} metrics for job {context.job.id}")
        return context


class RenameResultPageStep(PipelineStep):
    """Moves the tool's own index.html aside so the report can take its name."""

    def run(self, context: PipelineContext) -> PipelineContext:
        source = context.output_dir / RESULT_PAGE
        try:
            os.replace(source, context.output_dir / RAW_RESULT_PAGE)
        except OSError as exc:
            raise ResultPageError(f"Cannot rename {source}: {exc}") from exc
        return context


class GenerateReportStep(PipelineStep):
    def __init__(
        self,
        generator: ReportGenerator,
        location: str,
        results_base_url: str,
    ) -> None:
        self._generator = generator
        self._location = location
        self._results_base_url = results_base_url.rstrip("/")

    def run(self, context: PipelineContext) -> PipelineContext:
        metrics = context.metrics
        classification = classify(metrics.get("ruleScore"), metrics.get("speedIndex"))
        context.classification = classification
        job = context.job
        data: dict[str, Any] = {
            "id": job.id,
            "url": job.url,
            "browser": job.browser,
            "location": self._location,
            "connection": job.connection,
            "link": RAW_RESULT_PAGE,
            "myUrl": f"{self._results_base_url}/{job.output_path}/",
            "stars": classification.stars,
            "date": job.submitted_at,
            "bodyId": classification.body_id,
            "boxTitle": classification.box_title,
        }
        data.update(metrics)
        context.report_data = data
        self._generator.generate(context.output_dir, data)
        return context


class PruneStep(PipelineStep):
    """Best-effort: failures become warnings on the done status."""

    def __init__(
        self,
        packager: ArtifactPackager,
        targets: tuple[str, ...] = WORKING_FILES,
    ) -> None:
        self._packager = packager
        self._targets = targets

    def run(self, context: PipelineContext) -> PipelineContext:
        context.warnings.extend(self._packager.prune(context.output_dir, self._targets))
        return context


class InjectAssetsStep(PipelineStep):
    """Best-effort: failures become warnings on the done status."""

    def __init__(self, packager: ArtifactPackager) -> None:
        self._packager = packager

    def run(self, context: PipelineContext) -> PipelineContext:
        context.warnings.extend(self._packager.inject_assets(context.output_dir))
        return context


class ArchiveStep(PipelineStep):
    def __init__(self, packager: ArtifactPackager) -> None:
        self._packager = packager

    def run(self, context: PipelineContext) -> PipelineContext:
        destination = context.output_dir / f"{context.job.id}.tar.gz"
        context.archive_path = self._packager.archive(context.output_dir, destination)
        return context


class UploadStep(PipelineStep):
    def __init__(self, storage: BaseStorage) -> None:
        self._storage = storage

    def run(self, context: PipelineContext) -> PipelineContext:
        self._storage.upload_directory(context.output_dir, context.job.output_path)
        return context
