from fastapi import Depends, Request

from app.features.scan.services.scan.scan import ScanService
from app.features.scan.services.storage.report_store import ReportStore


def get_report_store(request: Request) -> ReportStore:
    """The application's report store, created once in `create_app()`."""
    return request.app.state.report_store


def get_scan_service(store: ReportStore = Depends(get_report_store)) -> ScanService:
    return ScanService(store)
