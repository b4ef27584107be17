from functools import lru_cache

import requests
from axe_selenium_python import Axe
from pydantic import ValidationError as PydanticValidationError
from selenium.common.exceptions import WebDriverException

from app.features.scan.exceptions import EvaluationError
from app.features.scan.schemas.scan import AxeResults
from app.features.scan.services.rendering.page_renderer import RenderedDocument
from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger("axe_evaluator")

# Conformance profile for every scan: WCAG 2.x level A plus level AA.
# Fixed on purpose, not a per-request option.
WCAG_RULE_TAGS = ("wcag2a", "wcag2aa")

_AXE_RUN_SCRIPT = """
var tags = arguments[0];
var done = arguments[arguments.length - 1];
if (typeof window.axe === 'undefined' || typeof window.axe.run !== 'function') {
    done({error: 'axe-core is not available in the page'});
    return;
}
window.axe.run(document, {runOnly: {type: 'tag', values: tags}})
    .then(function (results) { done({results: results}); })
    .catch(function (err) { done({error: String(err && err.message ? err.message : err)}); });
"""


@lru_cache(maxsize=1)
def download_axe_source(url: str) -> str:
    """
    Fetch an axe-core bundle from `url`. Only used when AXE_SCRIPT_URL is set.

    The result is cached for the life of the process.
    """
    logger.info(f"Downloading axe-core from {url}")
    try:
        response = requests.get(url, timeout=settings.AXE_DOWNLOAD_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as e:
        raise EvaluationError(f"Axe-core evaluation failed: could not download axe-core: {e}") from e

    if not response.text.strip():
        raise EvaluationError("Axe-core evaluation failed: downloaded axe-core bundle is empty")
    return response.text


def inject_axe(document: RenderedDocument):
    """
    Put axe-core into the page.

    By default the bundle shipped with axe-selenium-python is used, so a scan
    never touches the network for it. AXE_SCRIPT_PATH points at another local
    bundle; AXE_SCRIPT_URL opts in to downloading one instead.
    """
    if settings.AXE_SCRIPT_URL:
        document.inject_script(download_axe_source(settings.AXE_SCRIPT_URL))
        return

    if settings.AXE_SCRIPT_PATH:
        axe = Axe(document.driver, script_url=settings.AXE_SCRIPT_PATH)
    else:
        axe = Axe(document.driver)

    try:
        axe.inject()
    except OSError as e:
        raise EvaluationError(f"Axe-core evaluation failed: cannot read {axe.script_url}: {e}") from e


def evaluate(document: RenderedDocument) -> AxeResults:
    """
    Run axe-core inside the rendered page, restricted to WCAG_RULE_TAGS.

    Raises:
        EvaluationError: the engine could not be injected, threw, or returned
            something that is not an axe result
    """
    try:
        inject_axe(document)
        payload = document.run_async_script(
            _AXE_RUN_SCRIPT,
            list(WCAG_RULE_TAGS),
            timeout=settings.AXE_SCRIPT_TIMEOUT,
        )
    except WebDriverException as e:
        raise EvaluationError(f"Axe-core evaluation failed: {(e.msg or str(e)).strip()}") from e

    if not isinstance(payload, dict):
        raise EvaluationError("Axe-core evaluation failed: no result returned from the page")
    if payload.get("error"):
        raise EvaluationError(f"Axe-core evaluation failed: {payload['error']}")
    if not isinstance(payload.get("results"), dict):
        raise EvaluationError("Axe-core evaluation failed: no result returned from the page")

    try:
        results = AxeResults.model_validate(payload["results"])
    except PydanticValidationError as e:
        raise EvaluationError(f"Axe-core evaluation failed: unexpected result shape: {e}") from e

    logger.info(
        f"axe-core on {document.url}: {len(results.violations)} violations, "
        f"{len(results.passes)} passes, {len(results.inapplicable)} inapplicable"
    )
    return results
