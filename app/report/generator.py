import os
import tempfile
from pathlib import Path
from typing import Any

import jinja2

from app.report.exceptions import ReportError

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


class ReportGenerator:
    """Renders the human-readable result page for a finished test."""

    TEMPLATE_NAME = "report.html.j2"
    OUTPUT_NAME = "index.html"

    def __init__(self, template_dir: Path | None = None) -> None:
        self._env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(template_dir or _DEFAULT_TEMPLATE_DIR),
            autoescape=jinja2.select_autoescape(["html", "j2"]),
            undefined=jinja2.ChainableUndefined,
        )

    def generate(self, output_dir: Path, report_data: dict[str, Any]) -> Path:
        """Render report_data to <output_dir>/index.html.

        The page is written to a temporary file first and moved into place,
        so index.html is either the complete new report or left untouched.

        Raises:
            ReportError: if rendering or writing fails.
        """
        try:
            html = self._env.get_template(self.TEMPLATE_NAME).render(report_data, data=report_data)
        except jinja2.TemplateError as exc:
            raise ReportError(f"Failed to render report: {exc}") from exc

        target = output_dir / self.OUTPUT_NAME
        tmp_name = ""
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=output_dir,
                prefix=".report-",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(html)
            os.replace(tmp_name, target)
        except OSError as exc:
            if tmp_name:
                Path(tmp_name).unlink(missing_ok=True)
            raise ReportError(f"Failed to write report {target}: {exc}") from exc
        return target
