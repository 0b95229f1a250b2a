"""
Best-effort HTTP image download for logos and signatures
"""
import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 10  # seconds


def fetch_image(url, timeout=_DEFAULT_TIMEOUT, session=None) -> Optional[bytes]:
    """
    GET ``url`` and return the body.

    Non-200 responses and network errors both return None; nothing is raised.
    """
    if not url:
        return None
    http = session or requests
    try:
        response = http.get(url, timeout=timeout)
    except requests.RequestException as e:
        logger.warning(f"Image fetch failed for {url}: {e}")
        return None

    if response.status_code != 200:
        logger.warning(f"Image fetch for {url} returned HTTP {response.status_code}")
        return None
    return response.content
