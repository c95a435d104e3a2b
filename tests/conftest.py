import json
import os
from pathlib import Path

import pytest

from app.config.settings import Settings
from app.jobs.models import StatusMessage
from app.measurement.base import BaseMeasurementRunner
from app.measurement.exceptions import MeasurementError
from app.measurement.models import MeasurementConfig


class FakeMeasurementRunner(BaseMeasurementRunner):
    """Writes a minimal sitespeed.io result tree instead of running the tool."""

    def __init__(
        self,
        medians: dict[str, float] | None = None,
        fail: bool = False,
        write_summary: bool = True,
    ) -> None:
        self.medians = medians if medians is not None else {"ruleScore": 90, "speedIndex": 1200}
        self.fail = fail
        self.write_summary = write_summary
        self.prepared = 0
        self.runs: list[MeasurementConfig] = []

    def prepare(self) -> None:
        self.prepared += 1

    def run(self, config: MeasurementConfig) -> None:
        self.runs.append(config)
        if self.fail:
            raise MeasurementError("sitespeed.io exited with code 1: boom")
        out = config.data_dir / "sitespeed-result" / config.output_path
        (out / "data").mkdir(parents=True, exist_ok=True)
        (out / "index.html").write_text("<html>raw result</html>", encoding="utf-8")
        (out / "pages").mkdir(exist_ok=True)
        (out / "pages" / "page1.html").write_text("<html>page</html>", encoding="utf-8")
        for name in ("config.json", "sitespeed.io.log", "browsertime.log"):
            (out / name).write_text("working", encoding="utf-8")
        if self.write_summary:
            summary = [
                {"id": name, "stats": {"median": value, "mean": value}}
                for name, value in self.medians.items()
            ]
            summary.append({"id": "requests", "stats": {"median": 42}})
            (out / "data" / "summary.json").write_text(json.dumps(summary), encoding="utf-8")


class RecordingPublisher:
    """StatusPublisher stand-in that keeps every message in order."""

    def __init__(self) -> None:
        self.messages: list[StatusMessage] = []

    def publish(self, message: StatusMessage) -> bool:
        self.messages.append(message)
        return True

    def statuses(self, job_id: str) -> list[str]:
        return [m.status for m in self.messages if m.id == job_id]


@pytest.fixture()
def required_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Set the environment variables Settings cannot default."""
    monkeypatch.setenv("REDIS_HOST", os.environ.get("REDIS_HOST", "localhost"))
    monkeypatch.setenv("FETCH_QUEUE", "fetch")
    monkeypatch.setenv("RESULT_QUEUE", "result")
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    return tmp_path


@pytest.fixture()
def settings(required_env: Path) -> Settings:
    return Settings()


@pytest.fixture()
def fake_runner() -> FakeMeasurementRunner:
    return FakeMeasurementRunner()


@pytest.fixture()
def publisher() -> RecordingPublisher:
    return RecordingPublisher()
