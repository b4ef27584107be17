from typing import Callable, ContextManager, Optional

from app.features.scan.exceptions import ValidationError
from app.features.scan.schemas.scan import AxeResults, Report
from app.features.scan.services.evaluation.axe_evaluator import evaluate
from app.features.scan.services.rendering.page_renderer import RenderedDocument, open_rendered_document
from app.features.scan.services.report.builder import build_report
from app.features.scan.services.storage.report_store import ReportStore
from app.platform.logger import get_logger
from app.platform.utils.url_validator import validate_url

logger = get_logger("scan_service")

Renderer = Callable[[str], ContextManager[RenderedDocument]]
Evaluator = Callable[[RenderedDocument], AxeResults]
Builder = Callable[[str, AxeResults], Report]


class ScanService:
    """
    Runs one scan end to end: validate -> render -> evaluate -> build -> store.

    Any stage failure aborts the scan; nothing is retried. The browser session
    is closed by the renderer before the error reaches the caller.
    """

    def __init__(
        self,
        store: ReportStore,
        render: Renderer = open_rendered_document,
        evaluate: Evaluator = evaluate,
        build: Builder = build_report,
    ):
        self.store = store
        self.render = render
        self.evaluate = evaluate
        self.build = build

    def scan(self, url: Optional[str]) -> Report:
        """
        Raises:
            ValidationError: url missing or not http(s)
            NavigationError: browser could not start or page did not load
            EvaluationError: axe-core failed inside the page
        """
        is_valid, error = validate_url(url)
        if not is_valid:
            raise ValidationError(error)

        logger.info(f"Starting scan for URL: {url}")
        with self.render(url) as document:
            results = self.evaluate(document)

        report = self.build(url, results)
        self.store.put(report)
        logger.info(f"Stored report {report.id} for {url} ({report.violations} violations)")
        return report
