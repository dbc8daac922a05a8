"""Lightweight existence checks for public object URLs.

Issues an HTTP HEAD request and treats anything but a 2xx answer as
"does not exist". Never raises.
"""

from __future__ import annotations

import logging
import urllib.error
import urllib.request

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 3.0


def url_exists(url: str, timeout: float = DEFAULT_TIMEOUT) -> bool:
    """Check whether a URL answers a HEAD request with a 2xx status.

    Args:
        url: Absolute http(s) URL.
        timeout: Socket timeout in seconds.

    Returns:
        True if the object is reachable.
    """
    if not url.startswith(("http://", "https://")):
        return False

    request = urllib.request.Request(
        url,
        method="HEAD",
        headers={"Cache-Control": "no-cache", "Pragma": "no-cache"},
    )
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            status = response.status
    except (urllib.error.URLError, OSError, ValueError) as e:
        logger.debug(f"HEAD {url} failed: {e}")
        return False

    logger.debug(f"HEAD {url} -> {status}")
    return 200 <= status < 300
