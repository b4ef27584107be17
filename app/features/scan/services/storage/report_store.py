import threading
from typing import Dict

from app.features.scan.exceptions import NotFoundError
from app.features.scan.schemas.scan import Report


class ReportStore:
    """
    In-memory reports keyed by id, for the life of the process.

    No eviction, no persistence. Reports are immutable so a lock around the
    dict is all the coordination concurrent scans need.
    """

    def __init__(self):
        self._reports: Dict[str, Report] = {}
        self._lock = threading.Lock()

    def put(self, report: Report) -> None:
        with self._lock:
            self._reports[report.id] = report

    def get(self, report_id: str) -> Report:
        with self._lock:
            report = self._reports.get(report_id)
        if report is None:
            raise NotFoundError(report_id)
        return report

    def __contains__(self, report_id: object) -> bool:
        with self._lock:
            return report_id in self._reports

    def __len__(self) -> int:
        with self._lock:
            return len(self._reports)
