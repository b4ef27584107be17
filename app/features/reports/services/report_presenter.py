"""HTML rendering of stored reports."""
import os
from typing import Any, Dict, NamedTuple

from fastapi import status
from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.features.scan.exceptions import NotFoundError
from app.features.scan.schemas.scan import Finding, Report
from app.features.scan.services.report.remediation import explain_impact
from app.features.scan.services.storage.report_store import ReportStore
from app.platform.logger import get_logger

logger = get_logger("report_presenter")

current_dir = os.path.dirname(os.path.abspath(__file__))
reports_template_dir = os.path.join(current_dir, "../template")

env = Environment(
    loader=FileSystemLoader(reports_template_dir),
    autoescape=select_autoescape(["html"]),
)


class Page(NamedTuple):
    html: str
    status_code: int


def _finding_context(finding: Finding) -> Dict[str, Any]:
    level = finding.impact.value if finding.impact else "unknown"
    return {
        "id": finding.id,
        "impact_class": f"impact-{level}",
        "impact_label": level.capitalize(),
        "description": finding.description,
        "why_it_matters": explain_impact(finding.impact),
        "remediation": finding.remediation,
        "help_url": finding.help_url,
        "affected": f"{finding.nodes} element{'' if finding.nodes == 1 else 's'}",
    }


class ReportPresenter:
    def __init__(self, store: ReportStore):
        self.store = store

    def render_report(self, report: Report) -> str:
        template = env.get_template("report.html")
        return template.render(
            report=report,
            checked_on=report.timestamp.strftime("%B %d, %Y at %H:%M:%S %Z").strip(),
            findings=[_finding_context(f) for f in report.details],
        )

    def render_not_found(self, report_id: str) -> str:
        template = env.get_template("not_found.html")
        return template.render(report_id=report_id)

    def present(self, report_id: str) -> Page:
        """Render the report page, or the not-found page with a 404 status."""
        try:
            report = self.store.get(report_id)
        except NotFoundError:
            logger.info(f"Report {report_id} requested but not found")
            return Page(self.render_not_found(report_id), status.HTTP_404_NOT_FOUND)
        return Page(self.render_report(report), status.HTTP_200_OK)
