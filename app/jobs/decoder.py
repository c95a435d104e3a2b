"""Decodes inbound queue payloads into Job objects."""

import json
from typing import Any

from app.jobs.exceptions import JobValidationError, MessageDecodeError
from app.jobs.models import Job

# field -> (default, min, max)
_NUMERIC_LIMITS: dict[str, tuple[int, int, int]] = {
    "m": (1, 1, 100),
    "n": (1, 1, 11),
    "d": (0, 0, 5),
}


def decode_message(raw: str | bytes) -> Job:
    """Parse a raw queue payload and build a Job.

    Raises:
        MessageDecodeError: if the payload is not a JSON object.
        JobValidationError: if the object does not describe a runnable job.
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise MessageDecodeError(f"Payload is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise MessageDecodeError("Payload must be a JSON object")
    return build_job(data)


def build_job(data: dict[str, Any]) -> Job:
    """Validate a decoded message and build a Job.

    Raises:
        JobValidationError: on a missing url, a bad id or base path, or a
            non-integer limit.
    """
    job_id = _build_id(data.get("id"))
    url = data.get("u")
    if not url or not isinstance(url, str):
        raise JobValidationError(f"Missing url for job {job_id}")
    return Job(
        id=job_id,
        url=url,
        browser=_optional_str(data, "b"),
        connection=_optional_str(data, "c"),
        page_limit=_bounded_int(data, "m"),
        iteration_count=_bounded_int(data, "n"),
        depth=_bounded_int(data, "d"),
        base_path=_build_base_path(data),
        submitted_at=data.get("date"),
    )


def _build_id(raw: Any) -> str:
    if isinstance(raw, bool) or not isinstance(raw, (str, int)):
        raise JobValidationError("'id' must be a string or integer")
    job_id = str(raw).strip()
    if not job_id or job_id in (".", "..") or "/" in job_id or "\\" in job_id:
        raise JobValidationError(f"'id' is not a valid path segment: {raw!r}")
    return job_id


def _build_base_path(data: dict[str, Any]) -> str:
    raw = _optional_str(data, "p") or ""
    segments = [segment for segment in raw.split("/") if segment]
    for segment in segments:
        if segment in (".", "..") or "\\" in segment:
            raise JobValidationError(f"'p' is not a safe relative path: {raw!r}")
    return "/".join(segments)


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise JobValidationError(f"'{key}' must be a string")
    return value


def _bounded_int(data: dict[str, Any], key: str) -> int:
    default, low, high = _NUMERIC_LIMITS[key]
    raw = data.get(key)
    if not raw:
        return default
    if isinstance(raw, bool):
        raise JobValidationError(f"'{key}' must be an integer")
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise JobValidationError(f"'{key}' must be an integer, got {raw!r}") from exc
    if isinstance(raw, float) and raw != value:
        raise JobValidationError(f"'{key}' must be an integer, got {raw!r}")
    return min(max(value, low), high)
