"""
HTTP session helpers for minossync.

Both the release feed and the Microsoft Graph client talk JSON over HTTPS
through a shared requests.Session configured here.

Key Features:

- **Retry Logic with Exponential Backoff** - Automatically retries on
  transient failures (429, 500, 502, 503, 504) with exponential backoff.
  Configurable via urllib3.util.Retry. Retry-After headers are honoured.
- **JSON decoding with context** - Response bodies that are not JSON raise
  NetworkError with the first 200 characters of the body.
- **Error normalization** - requests exceptions are re-raised as
  NetworkError, chained with 'from err'.

Example:
Fetch a JSON document:

    >>> from minossync.io import make_session, request_json
    >>> session = make_session()
    >>> data = request_json(session, "GET", "https://example.com/releases.json")

Notes:
- Only idempotent methods are retried (GET, HEAD, PATCH); the token POST is not
- Timeouts are per-request, not total run time
- User-Agent identifies minossync to help with debugging/support
"""

from __future__ import annotations

import json
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from minossync import __version__
from minossync.exceptions import NetworkError

DEFAULT_TIMEOUT = 30


def make_session(
    *, total_retries: int = 5, backoff_factor: float = 0.5
) -> requests.Session:
    """
    Create a requests.Session with sane retry/backoff defaults.

    - Retries on common transient status codes (Graph throttles with 429).
    - Applies exponential backoff.
    - Sets a User-Agent and JSON Accept header.
    """
    s = requests.Session()
    retries = Retry(
        total=total_retries,
        backoff_factor=backoff_factor,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET", "HEAD", "PATCH"),
        respect_retry_after_header=True,
        raise_on_status=False,
    )
    s.headers.update(
        {
            "User-Agent": f"minossync/{__version__}",
            "Accept": "application/json",
        }
    )
    s.mount("http://", HTTPAdapter(max_retries=retries))
    s.mount("https://", HTTPAdapter(max_retries=retries))
    return s


def request_json(
    session: requests.Session,
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    payload: dict[str, Any] | None = None,
    timeout: int = DEFAULT_TIMEOUT,
    expect_body: bool = True,
) -> Any:
    """Send a request and decode the JSON response.

    Args:
        session: Session from make_session().
        method: HTTP method.
        url: Absolute URL.
        headers: Extra request headers.
        payload: JSON body for PATCH/POST.
        timeout: Per-request timeout in seconds.
        expect_body: If False, the body is not decoded and None is returned
            (Graph answers PATCH with 204 No Content).

    Returns:
        The decoded JSON value, or None when expect_body is False.

    Raises:
        requests.exceptions.HTTPError: For non-2xx responses, so callers
            can map specific status codes (e.g., 404) before falling back
            to NetworkError.
        NetworkError: On connection failures, timeouts, or invalid JSON.

    """
    try:
        response = session.request(
            method, url, headers=headers, json=payload, timeout=timeout
        )
    except requests.exceptions.RequestException as err:
        raise NetworkError(f"{method} {url} failed: {err}") from err

    response.raise_for_status()

    if not expect_body or not response.content:
        return None
    try:
        return response.json()
    except (json.JSONDecodeError, ValueError) as err:
        raise NetworkError(
            f"Invalid JSON response from {url}. Response: {response.text[:200]}"
        ) from err


def describe_http_error(err: requests.exceptions.HTTPError) -> str:
    """Format an HTTPError as 'status reason' for error messages."""
    response = err.response
    if response is None:
        return str(err)
    return f"{response.status_code} {response.reason}"
