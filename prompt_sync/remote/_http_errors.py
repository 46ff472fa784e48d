"""HTTP failure classification for the remote collaborators.

Failures are never retried here; classification only produces a precise
log message and tells the caller whether the failure looked transient.
"""

from dataclasses import dataclass

import httpx


TRANSIENT_STATUS_CODES = {408, 409, 425, 429, 500, 502, 503, 504}


@dataclass(frozen=True)
class HttpFailure:
    transient: bool
    message: str


def _body_excerpt(response: httpx.Response, limit: int = 200) -> str:
    try:
        text = response.text.strip()
    except (httpx.ResponseNotRead, UnicodeDecodeError):
        return ""
    if len(text) > limit:
        text = text[:limit] + "..."
    return text


def classify_http_error(*, service: str, target: str, error: httpx.HTTPError) -> HttpFailure:
    """Describe an httpx failure for logging."""
    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        code = response.status_code
        excerpt = _body_excerpt(response)
        detail = f": {excerpt}" if excerpt else ""

        if code == 429:
            retry_after = response.headers.get("retry-after")
            hint = f" Retry-After: {retry_after}." if retry_after else ""
            return HttpFailure(
                transient=True,
                message=f"{service} rate limited (HTTP 429) for {target}.{hint}",
            )
        if code in TRANSIENT_STATUS_CODES or code >= 500:
            return HttpFailure(
                transient=True,
                message=f"{service} transient HTTP {code} for {target}{detail}",
            )
        if code in (401, 403):
            return HttpFailure(
                transient=False,
                message=f"{service} rejected credentials (HTTP {code}) for {target}{detail}",
            )
        if code == 404:
            return HttpFailure(
                transient=False,
                message=f"{service} not found (HTTP 404) for {target}.",
            )
        return HttpFailure(
            transient=False,
            message=f"{service} rejected (HTTP {code}) for {target}{detail}",
        )

    if isinstance(error, httpx.TimeoutException):
        return HttpFailure(
            transient=True,
            message=f"{service} timed out while contacting {target}.",
        )

    if isinstance(error, httpx.RequestError):
        return HttpFailure(
            transient=True,
            message=f"{service} network error while contacting {target}: {error}.",
        )

    return HttpFailure(
        transient=True,
        message=f"{service} transport error for {target}: {error}.",
    )
