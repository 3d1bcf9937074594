"""HTTP session factory for forgewatch.

The catalog is browsed with the cookies of an already signed-in browser
session. Logging in is out of scope here: the session cookie is read from
the environment.
"""

from __future__ import annotations

import logging
import os

import httpx
from dotenv import load_dotenv

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:83.0) Gecko/20100101 Firefox/83.0"


def build_http_client(base_url: str, timeout: float) -> httpx.AsyncClient:
    """Create an authenticated httpx client from environment variables.

    We read CF_COOKIE via python-dotenv to keep secrets out of the repo.
    """

    load_dotenv()

    cookie = os.getenv("CF_COOKIE")

    # Fail fast on missing credentials; anonymous requests get HTML back.
    if not cookie:
        raise RuntimeError("Missing CF_COOKIE in environment")

    logging.getLogger(__name__).info("Initializing catalog HTTP client for %s", base_url)

    return httpx.AsyncClient(
        base_url=base_url,
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
        headers={
            "User-Agent": USER_AGENT,
            "Accept": "application/json, text/javascript, */*; q=0.01",
            "X-Requested-With": "XMLHttpRequest",
            "Cookie": cookie,
        },
    )
