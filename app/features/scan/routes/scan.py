from fastapi import APIRouter, Depends, status

from app.features.scan.dependencies.scan import get_scan_service
from app.features.scan.schemas.scan import Report, ScanIn
from app.features.scan.services.scan.scan import ScanService

router = APIRouter(tags=["scan"])


# Plain `def`: the browser work blocks, so FastAPI runs each scan in its threadpool.
@router.post("/scan", response_model=Report, status_code=status.HTTP_200_OK)
def start_scan(
    scan_in: ScanIn,
    service: ScanService = Depends(get_scan_service),
):
    """
    Scan a page for WCAG 2 A/AA issues and return the stored report.

    Errors are turned into responses by the app-level exception handlers:
    400 for a missing/invalid URL, 500 for render or evaluation failures.
    """
    return service.scan(scan_in.url)
