"""Release date lookup from the npm registry."""

import logging
from datetime import date, datetime, timezone
from urllib.parse import quote

import httpx

from prompt_sync.deps import SyncDeps
from prompt_sync.remote._http_errors import classify_http_error

logger = logging.getLogger(__name__)


def ordinal(n: int) -> str:
    """1 -> "1st", 2 -> "2nd", 11 -> "11th", 23 -> "23rd"."""
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def format_release_date(d: date) -> str:
    """Human date like "November 1st, 2025"."""
    return f"{d.strftime('%B')} {ordinal(d.day)}, {d.year}"


def package_page_url(package: str, version: str) -> str:
    return f"https://www.npmjs.com/package/{package}/v/{version}"


async def get_release_date(client: httpx.AsyncClient, version: str, deps: SyncDeps) -> str | None:
    """Formatted publish date of ``version``, or None if it cannot be determined."""
    url = f"{deps.npm_registry_url}/{quote(deps.npm_package, safe='@')}"
    try:
        resp = await client.get(url, timeout=deps.http_timeout)
        resp.raise_for_status()
        data = resp.json()
    except httpx.HTTPError as e:
        failure = classify_http_error(service="npm registry", target=deps.npm_package, error=e)
        logger.warning(f"Could not fetch npm package data: {failure.message}")
        return None
    except ValueError as e:
        logger.warning(f"npm registry returned invalid JSON for {deps.npm_package}: {e}")
        return None

    times = data.get("time") if isinstance(data, dict) else None
    timestamp = times.get(version) if isinstance(times, dict) else None
    if not timestamp:
        logger.warning(f"No release date found for v{version}")
        return None

    try:
        published = datetime.fromisoformat(str(timestamp))
    except ValueError:
        logger.warning(f"Unparseable release timestamp for v{version}: {timestamp!r}")
        return None
    if published.tzinfo is not None:
        published = published.astimezone(timezone.utc)
    return format_release_date(published.date())
