import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from app.jobs.models import MetricSet
from app.processor.exceptions import SummaryReadError

METRIC_NAMES: tuple[str, ...] = (
    "ruleScore",
    "speedIndex",
    "domContentLoadedTime",
    "domInteractiveTime",
    "firstPaint",
    "pageLoadTime",
    "backEndTime",
    "frontEndTime",
)


def load_summary(path: Path) -> list[Any]:
    """Read the aggregate summary written by the measurement run.

    Raises:
        SummaryReadError: if the file is missing, unreadable or not a JSON list.
    """
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise SummaryReadError(f"Cannot read summary {path}: {exc}") from exc
    except ValueError as exc:
        raise SummaryReadError(f"Summary {path} is not valid JSON: {exc}") from exc
    if not isinstance(document, list):
        raise SummaryReadError(f"Summary {path} must contain a list of aggregates")
    return document


class MetricExtractor:
    """Selects the median of each allow-listed aggregate."""

    def __init__(self, metric_names: Iterable[str] = METRIC_NAMES) -> None:
        self._metric_names = frozenset(metric_names)

    def extract(self, summary: Iterable[Any]) -> MetricSet:
        metrics: MetricSet = {}
        for aggregate in summary:
            if not isinstance(aggregate, dict):
                continue
            name = aggregate.get("id")
            if name not in self._metric_names:
                continue
            stats = aggregate.get("stats")
            if not isinstance(stats, dict):
                continue
            median = stats.get("median")
            if isinstance(median, bool) or not isinstance(median, (int, float)):
                continue
            metrics[name] = median
        return metrics
