"""
HTTP transport -- one request in flight, exactly one callback invoked.

``request`` sends a single call with httpx and normalises the outcome:

  2xx            -> success(json, response)
  HTTP error     -> failure(payload, response)
  network error  -> failure(payload, None)

``payload`` is the decoded error body with ``exception`` always filled in.
Without a failure callback a ``RequestFailure`` is raised instead.
"""
from __future__ import annotations

from typing import Any, Callable, Mapping

import httpx

from tabquery.core.config import get_settings
from tabquery.core.errors import RequestFailure
from tabquery.core.logging import get_logger
from tabquery.core.utils import timer

logger = get_logger(__name__)

SuccessCallback = Callable[[Any, httpx.Response], Any]
FailureCallback = Callable[[dict[str, Any], "httpx.Response | None"], Any]

_DEFAULT_FAILURE_MESSAGE = "Communication failure."


def get_method(value: str | None) -> str:
    """Upper-cased ``GET`` or ``POST``; anything else becomes ``GET``."""
    if value and value.upper() in ("GET", "POST"):
        return value.upper()
    return "GET"


def _is_json(response: httpx.Response) -> bool:
    return "application/json" in response.headers.get("content-type", "")


def _decode(response: httpx.Response) -> Any:
    if not _is_json(response):
        return None
    try:
        return response.json()
    except ValueError:
        logger.warning("Response claimed JSON but could not be decoded (%d bytes)", len(response.content))
        return None


def _fail(
    failure: FailureCallback | None,
    payload: dict[str, Any],
    response: httpx.Response | None,
) -> Any:
    status = response.status_code if response is not None else 0
    logger.warning("Request failed status=%d: %s", status, payload["exception"])
    if failure is not None:
        return failure(payload, response)
    raise RequestFailure(payload["exception"], status=status, payload=payload)


def request(
    url: str,
    method: str = "GET",
    params: Mapping[str, Any] | None = None,
    json_data: Any = None,
    success: SuccessCallback | None = None,
    failure: FailureCallback | None = None,
    timeout: float | None = None,
    client: httpx.Client | None = None,
) -> Any:
    """Send one request and hand the result to *success* or *failure*.

    Parameters
    ----------
    url : str
        Absolute URL, usually from ``build_url``.
    params : mapping, optional
        Query parameters; list values repeat the parameter name.
    json_data : any, optional
        JSON request body.
    client : httpx.Client, optional
        Reuse an existing client.  A client created here is closed afterwards.

    Returns
    -------
    The callback's return value, or the decoded JSON body when *success* is
    not given.
    """
    settings = get_settings()
    method = get_method(method)
    if timeout is None:
        timeout = settings.request_timeout

    owns_client = client is None
    if client is None:
        auth = ("apikey", settings.api_key) if settings.api_key else None
        client = httpx.Client(auth=auth)

    logger.info("%s %s", method, url)
    try:
        with timer() as t:
            response = client.request(
                method,
                url,
                params=dict(params) if params else None,
                json=json_data,
                timeout=timeout,
            )
    except httpx.HTTPError as exc:
        return _fail(failure, {"exception": str(exc) or _DEFAULT_FAILURE_MESSAGE}, None)
    finally:
        if owns_client:
            client.close()

    logger.info("Response status=%d in %d ms", response.status_code, t["elapsed_ms"])
    body = _decode(response)

    if response.is_success:
        if success is not None:
            return success(body, response)
        return body

    payload: dict[str, Any] = dict(body) if isinstance(body, dict) else {}
    if not payload.get("exception"):
        payload["exception"] = response.reason_phrase or _DEFAULT_FAILURE_MESSAGE
    return _fail(failure, payload, response)
