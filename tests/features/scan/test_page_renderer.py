import json
from unittest.mock import MagicMock, patch

import pytest
from selenium.common.exceptions import TimeoutException, WebDriverException

from app.features.scan.exceptions import EvaluationError, NavigationError
from app.features.scan.services.rendering import page_renderer
from app.features.scan.services.rendering.page_renderer import (
    NetworkTracker,
    RenderedDocument,
    open_rendered_document,
)


def network_event(method, request_id):
    return {
        "level": "INFO",
        "message": json.dumps({"message": {"method": method, "params": {"requestId": request_id}}}),
    }


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


@pytest.fixture
def mock_driver(monkeypatch):
    monkeypatch.setattr(page_renderer.settings, "NETWORK_IDLE_MS", 0)
    driver = MagicMock()
    driver.get_log.return_value = []
    driver.execute_script.return_value = "complete"
    return driver


@pytest.fixture
def patched_build_driver(mock_driver):
    with patch.object(page_renderer, "build_driver", return_value=mock_driver) as build:
        yield build


class TestOpenRenderedDocument:
    def test_yields_document_and_releases_driver(self, mock_driver, patched_build_driver):
        with open_rendered_document("https://example.com", timeout=5) as document:
            assert isinstance(document, RenderedDocument)
            assert document.url == "https://example.com"
            mock_driver.quit.assert_not_called()

        mock_driver.set_page_load_timeout.assert_called_once_with(5)
        mock_driver.get.assert_called_once_with("https://example.com")
        mock_driver.quit.assert_called_once()

    def test_page_load_timeout(self, mock_driver, patched_build_driver):
        mock_driver.get.side_effect = TimeoutException("timeout: Timed out receiving message from renderer")

        with pytest.raises(NavigationError) as exc:
            with open_rendered_document("https://slow.example.com", timeout=30):
                pytest.fail("body must not run when navigation fails")

        assert "Failed to load URL" in exc.value.message
        assert "timed out after 30 seconds" in exc.value.message
        mock_driver.quit.assert_called_once()

    def test_unreachable_host(self, mock_driver, patched_build_driver):
        mock_driver.get.side_effect = WebDriverException("unknown error: net::ERR_NAME_NOT_RESOLVED")

        with pytest.raises(NavigationError) as exc:
            with open_rendered_document("https://nope.invalid"):
                pass

        assert "ERR_NAME_NOT_RESOLVED" in exc.value.message
        mock_driver.quit.assert_called_once()

    def test_network_never_settles(self, mock_driver, patched_build_driver):
        with patch.object(page_renderer, "wait_for_network_idle", side_effect=TimeoutException()):
            with pytest.raises(NavigationError) as exc:
                with open_rendered_document("https://busy.example.com", timeout=3):
                    pass

        assert "did not settle" in exc.value.message
        mock_driver.quit.assert_called_once()

    def test_requests_left_in_flight_fail_navigation(self, mock_driver, patched_build_driver):
        pending = [network_event("Network.requestWillBeSent", f"poll-{i}") for i in range(5)]
        mock_driver.get_log.side_effect = lambda log_type: pending

        with pytest.raises(NavigationError) as exc:
            with open_rendered_document("https://busy.example.com", timeout=1):
                pytest.fail("body must not run while the network is busy")

        assert exc.value.message == "Failed to load URL: network did not settle within 1 seconds"
        mock_driver.quit.assert_called_once()

    def test_releases_driver_when_body_raises(self, mock_driver, patched_build_driver):
        with pytest.raises(EvaluationError):
            with open_rendered_document("https://example.com"):
                raise EvaluationError("Axe-core evaluation failed: boom")

        mock_driver.quit.assert_called_once()

    def test_quit_failure_does_not_mask_original_error(self, mock_driver, patched_build_driver):
        mock_driver.quit.side_effect = WebDriverException("chrome not reachable")

        with pytest.raises(EvaluationError):
            with open_rendered_document("https://example.com"):
                raise EvaluationError("Axe-core evaluation failed: boom")

    def test_quit_failure_after_success_is_swallowed(self, mock_driver, patched_build_driver):
        mock_driver.quit.side_effect = WebDriverException("chrome not reachable")

        with open_rendered_document("https://example.com") as document:
            assert document.url == "https://example.com"

    def test_browser_cannot_start(self):
        with patch.object(page_renderer, "build_driver", side_effect=WebDriverException("chromedriver missing")):
            with pytest.raises(NavigationError) as exc:
                with open_rendered_document("https://example.com"):
                    pass

        assert "Failed to start browser" in exc.value.message


class TestWaitForNetworkIdle:
    def test_idle_page_returns(self, mock_driver):
        page_renderer.wait_for_network_idle(mock_driver, timeout=1)

        mock_driver.get_log.assert_called_with("performance")

    def test_times_out_while_requests_stay_in_flight(self, mock_driver):
        busy = [network_event("Network.requestWillBeSent", f"req-{i}") for i in range(5)]
        mock_driver.get_log.side_effect = lambda log_type: busy

        with pytest.raises(TimeoutException):
            page_renderer.wait_for_network_idle(mock_driver, timeout=0.3)


class TestNetworkTracker:
    def test_counts_started_requests_until_they_end(self):
        tracker = NetworkTracker(max_inflight=2, quiet_seconds=0.5, clock=FakeClock())

        tracker.update([network_event("Network.requestWillBeSent", f"req-{i}") for i in range(4)])
        assert tracker.inflight == {"req-0", "req-1", "req-2", "req-3"}
        assert tracker.idle_since is None

        tracker.update([
            network_event("Network.loadingFinished", "req-0"),
            network_event("Network.loadingFailed", "req-1"),
        ])
        assert tracker.inflight == {"req-2", "req-3"}
        assert tracker.idle_since is not None

    def test_redirect_reuses_request_id(self):
        tracker = NetworkTracker(max_inflight=0, quiet_seconds=0, clock=FakeClock())

        tracker.update([
            network_event("Network.requestWillBeSent", "req-1"),
            network_event("Network.requestWillBeSent", "req-1"),
            network_event("Network.loadingFinished", "req-1"),
        ])

        assert tracker.inflight == set()

    def test_ignores_unrelated_and_malformed_entries(self):
        tracker = NetworkTracker(max_inflight=0, quiet_seconds=0, clock=FakeClock())

        tracker.update([
            {"level": "INFO", "message": "not json"},
            {"level": "INFO"},
            {"level": "INFO", "message": json.dumps({"message": {"method": "Page.loadEventFired", "params": {}}})},
            network_event("Network.responseReceived", "req-9"),
        ])

        assert tracker.inflight == set()
        assert tracker.idle_since is not None

    def test_quiet_window_restarts_after_busy_period(self, mock_driver):
        clock = FakeClock()
        tracker = NetworkTracker(max_inflight=2, quiet_seconds=0.5, clock=clock)
        busy = [network_event("Network.requestWillBeSent", f"req-{i}") for i in range(3)]

        mock_driver.get_log.return_value = busy
        assert tracker.is_idle(mock_driver) is False

        clock.now += 1
        mock_driver.get_log.return_value = [network_event("Network.loadingFinished", "req-0")]
        assert tracker.is_idle(mock_driver) is False

        clock.now += 0.4
        mock_driver.get_log.return_value = []
        assert tracker.is_idle(mock_driver) is False

        clock.now += 0.2
        assert tracker.is_idle(mock_driver) is True

    def test_waits_for_document_complete(self, mock_driver):
        tracker = NetworkTracker(max_inflight=2, quiet_seconds=0, clock=FakeClock())
        mock_driver.execute_script.return_value = "interactive"

        assert tracker.is_idle(mock_driver) is False

        mock_driver.execute_script.return_value = "complete"
        assert tracker.is_idle(mock_driver) is True


class TestBuildDriver:
    def test_enables_performance_log(self, monkeypatch):
        monkeypatch.setattr(page_renderer.settings, "CHROMEDRIVER_PATH", None)
        monkeypatch.setattr(page_renderer.settings, "USE_WEBDRIVER_MANAGER", False)

        with patch.object(page_renderer.webdriver, "Chrome") as chrome:
            page_renderer.build_driver()

        options = chrome.call_args.kwargs["options"]
        assert options.capabilities["goog:loggingPrefs"] == {"performance": "ALL"}
        assert "--headless=new" in options.arguments


class TestRenderedDocument:
    def test_run_async_script_sets_timeout(self, mock_driver):
        mock_driver.execute_async_script.return_value = {"ok": True}
        document = RenderedDocument(mock_driver, "https://example.com")

        result = document.run_async_script("done(1)", "a", timeout=60)

        assert result == {"ok": True}
        mock_driver.set_script_timeout.assert_called_once_with(60)
        mock_driver.execute_async_script.assert_called_once_with("done(1)", "a")

    def test_title_defaults_to_empty(self, mock_driver):
        mock_driver.title = None
        assert RenderedDocument(mock_driver, "https://example.com").title == ""
