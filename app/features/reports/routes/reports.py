from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from app.features.reports.services.report_presenter import ReportPresenter
from app.features.scan.dependencies.scan import get_report_store
from app.features.scan.services.storage.report_store import ReportStore

router = APIRouter(tags=["reports"])


def get_report_presenter(store: ReportStore = Depends(get_report_store)) -> ReportPresenter:
    return ReportPresenter(store)


@router.get("/report/{report_id}", response_class=HTMLResponse)
async def view_report(
    report_id: str,
    presenter: ReportPresenter = Depends(get_report_presenter),
):
    """Stored report as a standalone HTML page; unknown ids get a 404 page."""
    page = presenter.present(report_id)
    return HTMLResponse(content=page.html, status_code=page.status_code)
