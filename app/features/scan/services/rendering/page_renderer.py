import json
import time
from contextlib import contextmanager
from typing import Any, Callable, Iterable, Iterator, Optional, Set

from selenium import webdriver
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.support.ui import WebDriverWait
from webdriver_manager.chrome import ChromeDriverManager

from app.features.scan.exceptions import NavigationError
from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger("page_renderer")

REQUEST_STARTED = "Network.requestWillBeSent"
REQUEST_ENDED = ("Network.loadingFinished", "Network.loadingFailed")


class NetworkTracker:
    """
    Counts in-flight requests from Chrome's performance log.

    A request is in flight from `Network.requestWillBeSent` until
    `Network.loadingFinished` or `Network.loadingFailed` arrives for the same
    requestId. The page is idle once at most `max_inflight` requests have been
    open for `quiet_seconds` and the document is complete.
    """

    def __init__(self, max_inflight: int, quiet_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.max_inflight = max_inflight
        self.quiet_seconds = quiet_seconds
        self.clock = clock
        self.inflight: Set[str] = set()
        self.idle_since: Optional[float] = clock()

    def update(self, entries: Iterable[dict]) -> None:
        for entry in entries:
            try:
                message = json.loads(entry["message"])["message"]
            except (KeyError, TypeError, ValueError):
                continue

            request_id = message.get("params", {}).get("requestId")
            if request_id is None:
                continue

            method = message.get("method")
            if method == REQUEST_STARTED:
                self.inflight.add(request_id)
            elif method in REQUEST_ENDED:
                self.inflight.discard(request_id)

        if len(self.inflight) > self.max_inflight:
            self.idle_since = None
        elif self.idle_since is None:
            self.idle_since = self.clock()

    def is_idle(self, driver: webdriver.Chrome) -> bool:
        self.update(driver.get_log("performance"))
        if self.idle_since is None:
            return False
        if driver.execute_script("return document.readyState") != "complete":
            return False
        return self.clock() - self.idle_since >= self.quiet_seconds


class RenderedDocument:
    """A fully loaded page inside a live browser session."""

    def __init__(self, driver: webdriver.Chrome, url: str):
        self.driver = driver
        self.url = url

    @property
    def title(self) -> str:
        return self.driver.title or ""

    def inject_script(self, source: str) -> None:
        self.driver.execute_script(source)

    def run_async_script(self, script: str, *args: Any, timeout: Optional[int] = None) -> Any:
        if timeout is not None:
            self.driver.set_script_timeout(timeout)
        return self.driver.execute_async_script(script, *args)


def build_driver() -> webdriver.Chrome:
    chrome_options = Options()
    chrome_options.add_argument('--headless=new')
    chrome_options.add_argument('--no-sandbox')
    chrome_options.add_argument('--disable-setuid-sandbox')
    chrome_options.add_argument('--disable-dev-shm-usage')
    chrome_options.add_argument('--disable-gpu')
    # Network.* events in driver.get_log("performance") feed NetworkTracker
    chrome_options.set_capability('goog:loggingPrefs', {'performance': 'ALL'})

    if settings.CHROMEDRIVER_PATH:
        driver_service = Service(executable_path=settings.CHROMEDRIVER_PATH)
        return webdriver.Chrome(service=driver_service, options=chrome_options)

    if settings.USE_WEBDRIVER_MANAGER:
        driver_service = Service(ChromeDriverManager().install())
        return webdriver.Chrome(service=driver_service, options=chrome_options)

    return webdriver.Chrome(options=chrome_options)


def release_driver(driver: webdriver.Chrome) -> None:
    """Quit the browser. Errors here must never hide the scan's own outcome."""
    try:
        driver.quit()
    except Exception as e:
        logger.warning(f"Ignoring error while closing browser: {e}")


def _error_text(exc: WebDriverException) -> str:
    return (exc.msg or str(exc)).strip()


def wait_for_network_idle(driver: webdriver.Chrome, timeout: float) -> None:
    tracker = NetworkTracker(settings.NETWORK_IDLE_MAX_INFLIGHT, settings.NETWORK_IDLE_MS / 1000)
    WebDriverWait(driver, timeout, poll_frequency=0.1).until(tracker.is_idle)


def navigate(driver: webdriver.Chrome, url: str, timeout: int) -> None:
    """
    Load `url` and wait until the network is substantially idle.

    Navigation and the idle wait share one `timeout` budget (seconds).

    Raises:
        NavigationError: page load failed or did not settle in time
    """
    driver.set_page_load_timeout(timeout)
    start_time = time.monotonic()

    logger.info(f"Navigating to {url}")
    try:
        driver.get(url)
    except TimeoutException as e:
        raise NavigationError(f"Failed to load URL: page load timed out after {timeout} seconds") from e
    except WebDriverException as e:
        raise NavigationError(f"Failed to load URL: {_error_text(e)}") from e

    remaining = max(timeout - (time.monotonic() - start_time), 1.0)
    try:
        wait_for_network_idle(driver, remaining)
    except TimeoutException as e:
        raise NavigationError(f"Failed to load URL: network did not settle within {timeout} seconds") from e
    except WebDriverException as e:
        raise NavigationError(f"Failed to load URL: {_error_text(e)}") from e

    logger.info(f"Page settled for {url} in {time.monotonic() - start_time:.2f}s")


@contextmanager
def open_rendered_document(url: str, timeout: Optional[int] = None) -> Iterator[RenderedDocument]:
    """
    Open a fresh headless browser, load `url` and yield the rendered page.

    The browser is quit when the block exits, whether it succeeds or raises.

    Example:
        with open_rendered_document("https://example.com") as document:
            results = evaluate(document)
    """
    timeout = timeout or settings.PAGE_LOAD_TIMEOUT

    try:
        driver = build_driver()
    except Exception as e:
        logger.error(f"Could not start browser for {url}: {e}")
        raise NavigationError(f"Failed to start browser: {e}") from e

    try:
        navigate(driver, url, timeout)
        yield RenderedDocument(driver, url)
    finally:
        release_driver(driver)
