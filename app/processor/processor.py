from pathlib import Path

from app.artifacts.packager import ArtifactPackager
from app.config.settings import Settings
from app.jobs.models import STATUS_RUNNING, STATUS_UPLOADING, Job
from app.logging.logger import Log
from app.measurement.base import BaseMeasurementRunner
from app.measurement.prerequisite import RuntimePrerequisite
from app.metrics.extractor import MetricExtractor
from app.processor.pipeline import PipelineContext, PipelineStep
from app.processor.steps import (
    ArchiveStep,
    ExtractMetricsStep,
    GenerateReportStep,
    InjectAssetsStep,
    PruneStep,
    RenameResultPageStep,
    ReportDoneStep,
    ReportFailedStep,
    ReportStatusStep,
    RunMeasurementStep,
    UploadStep,
)
from app.report.generator import ReportGenerator
from app.storage.base import BaseStorage
from app.worker.status import StatusPublisher


class Processor:
    """Runs the page test pipeline for one job.

    Pipeline: running -> measure -> extract -> rename -> report -> prune ->
    assets -> archive -> uploading -> upload -> done. The first failing step
    stops the run; failed_step reports it and the error is re-raised.
    """

    def __init__(
        self,
        steps: list[PipelineStep],
        failed_step: PipelineStep,
        result_root: Path,
    ) -> None:
        self._steps = steps
        self._failed_step = failed_step
        self._result_root = result_root

    def output_dir_for(self, job: Job) -> Path:
        return self._result_root / job.output_path

    def process(self, job: Job) -> PipelineContext:
        Log.info(f"Processing job {job.id} ({job.url})")
        context = PipelineContext(job=job, output_dir=self.output_dir_for(job))
        try:
            for step in self._steps:
                context = step.run(context)
        except Exception as exc:
            context.error_message = str(exc) or type(exc).__name__
            self._failed_step.run(context)
            raise
        return context


def build_processor(
    settings: Settings,
    runner: BaseMeasurementRunner,
    prerequisite: RuntimePrerequisite,
    storage: BaseStorage,
    publisher: StatusPublisher,
    assets_dir: Path | None = None,
) -> Processor:
    """Build a Processor wired with the standard page test steps."""
    packager = ArtifactPackager(assets_dir=assets_dir)
    steps: list[PipelineStep] = [
        ReportStatusStep(publisher, STATUS_RUNNING),
        RunMeasurementStep(runner, prerequisite, settings.data_dir, settings.result_root),
        ExtractMetricsStep(MetricExtractor()),
        RenameResultPageStep(),
        GenerateReportStep(
            ReportGenerator(),
            location=settings.fetch_queue,
            results_base_url=settings.results_base_url,
        ),
        PruneStep(packager),
        InjectAssetsStep(packager),
        ArchiveStep(packager),
        ReportStatusStep(publisher, STATUS_UPLOADING),
        UploadStep(storage),
        ReportDoneStep(publisher),
    ]
    return Processor(
        steps=steps,
        failed_step=ReportFailedStep(publisher),
        result_root=settings.result_root,
    )
