import re
from typing import Optional, Tuple

# http(s):// followed by a host that does not start with a separator, then any non-whitespace
SCAN_URL_PATTERN = re.compile(r"^https?://[^\s$.?#].[^\s]*$")


def validate_url(url: Optional[str]) -> Tuple[bool, str]:
    """
    Check a user-submitted scan target.

    Returns (is_valid, error_message); the message is empty when valid.
    The URL is not normalized: what the client sent is what gets scanned.
    """
    if not url:
        return False, "URL required"

    if not SCAN_URL_PATTERN.fullmatch(url):
        return False, "Invalid URL format. Use http:// or https://"

    return True, ""
