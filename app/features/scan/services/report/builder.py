from datetime import datetime, timezone
from typing import Callable, Optional

from uuid_extension import uuid7

from app.features.scan.schemas.scan import AxeResults, Finding, RawFinding, Report
from app.features.scan.services.report.remediation import remediation_for


def new_report_id() -> str:
    # UUIDv7: time-ordered, and unique across concurrent scans
    return str(uuid7())


def normalize_finding(violation: RawFinding) -> Finding:
    return Finding(
        id=violation.id,
        impact=violation.impact,
        description=violation.description,
        nodes=len(violation.nodes),
        help=violation.help,
        help_url=violation.help_url,
        remediation=remediation_for(violation.id),
    )


def build_report(
    url: str,
    results: AxeResults,
    *,
    now: Optional[datetime] = None,
    id_factory: Callable[[], str] = new_report_id,
) -> Report:
    """
    Turn raw axe-core results into a Report. No I/O.

    Only violations are kept in `details`; passes and inapplicable rules are
    reported as counts.
    """
    return Report(
        id=id_factory(),
        url=url,
        timestamp=now or datetime.now(timezone.utc),
        violations=len(results.violations),
        passes=len(results.passes),
        inapplicable=len(results.inapplicable),
        details=tuple(normalize_finding(v) for v in results.violations),
    )
