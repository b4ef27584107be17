"""
Scan pipeline errors.

Every failure in the pipeline is one of these; the HTTP layer maps them to
status codes in `app.platform.exceptions`.
"""


class ScanError(Exception):
    """Base class for scan pipeline failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ScanError):
    """The submitted URL is missing or malformed."""


class NavigationError(ScanError):
    """The browser session could not be created or the page could not be loaded."""


class EvaluationError(ScanError):
    """The accessibility engine could not be loaded or failed inside the page."""


class NotFoundError(ScanError):
    """No report is stored under the requested id."""

    def __init__(self, report_id: str):
        super().__init__(f"Report {report_id} not found")
        self.report_id = report_id
