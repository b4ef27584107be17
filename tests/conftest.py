"""
Test configuration and fixtures for the AccessiScan API.

Every test gets a fresh application (and so an empty report store). No test
starts a real browser: scan stages are replaced with fakes or mocks.
"""

from contextlib import contextmanager
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from app.features.scan.schemas.scan import AxeResults
from app.features.scan.services.rendering.page_renderer import RenderedDocument
from app.features.scan.services.scan.scan import ScanService


@pytest.fixture(scope="function")
def test_app():
    """Create FastAPI test application."""
    from app.main import create_app

    return create_app()


@pytest.fixture(scope="function")
def client(test_app) -> Generator[TestClient, None, None]:
    """
    Create a test client for making HTTP requests.
    """
    with TestClient(test_app) as test_client:
        yield test_client


@pytest.fixture
def report_store(test_app):
    return test_app.state.report_store


def _make_axe_results(violations=None, passes=0, inapplicable=0) -> AxeResults:
    """axe-core style results with `passes`/`inapplicable` filler rules."""
    return AxeResults.model_validate({
        "violations": violations or [],
        "passes": [{"id": f"pass-rule-{i}", "nodes": [{}]} for i in range(passes)],
        "inapplicable": [{"id": f"na-rule-{i}", "nodes": []} for i in range(inapplicable)],
    })


IMAGE_ALT_VIOLATION = {
    "id": "image-alt",
    "impact": "serious",
    "description": "Images must have alt text",
    "nodes": [{}],
    "help": "Images must have alternate text",
    "helpUrl": "https://dequeuniversity.com/rules/axe/4.10/image-alt",
}


class FakeScanStages:
    """Records calls to the render/evaluate stages of a ScanService."""

    def __init__(self, results: AxeResults):
        self.results = results
        self.rendered_urls = []
        self.closed = 0

    @contextmanager
    def render(self, url):
        self.rendered_urls.append(url)
        try:
            yield RenderedDocument(driver=None, url=url)
        finally:
            self.closed += 1

    def evaluate(self, document):
        return self.results


@pytest.fixture
def fake_stages():
    return FakeScanStages(_make_axe_results([dict(IMAGE_ALT_VIOLATION)], passes=17, inapplicable=5))


@pytest.fixture
def scan_client(test_app, client, fake_stages):
    """Client whose scan endpoint uses `fake_stages` instead of a browser."""
    from app.features.scan.dependencies.scan import get_scan_service

    def override_get_scan_service():
        return ScanService(
            test_app.state.report_store,
            render=fake_stages.render,
            evaluate=fake_stages.evaluate,
        )

    test_app.dependency_overrides[get_scan_service] = override_get_scan_service
    yield client
    test_app.dependency_overrides.pop(get_scan_service, None)


@pytest.fixture
def make_axe_results():
    return _make_axe_results


@pytest.fixture
def image_alt_violation():
    return dict(IMAGE_ALT_VIOLATION)
