"""Token counting via the Anthropic count_tokens endpoint.

New and changed prompts are counted in fixed-size batches: every request in a
batch runs concurrently, the batch is awaited as a whole, and a fixed delay
separates consecutive batches. A failed count is logged and recorded as 0.

Unchanged prompts are not counted again; their previously published counts
are read back from the index document instead.
"""

import asyncio
import logging
import re
from dataclasses import dataclass

import httpx

from prompt_sync.deps import SyncDeps
from prompt_sync.remote._http_errors import classify_http_error

logger = logging.getLogger(__name__)

# Entry lines carry "(<path>/<file>.md) (**<n>** tks)"
_TOKEN_ENTRY_RE = re.compile(
    r"\((?:[^()\s]*/)?([^/()\s]+\.md)\)\s*\(\*\*(\d+)\*\*\s*tks\)"
)


@dataclass(frozen=True)
class CountRequest:
    filename: str
    text: str


class TokenCountError(Exception):
    """The endpoint answered, but not with a usable token count."""


async def count_tokens(client: httpx.AsyncClient, text: str, deps: SyncDeps) -> int:
    """Count tokens for ``text`` sent as a single user message."""
    resp = await client.post(
        deps.token_count_url,
        headers={
            "content-type": "application/json",
            "anthropic-version": deps.anthropic_version,
            "x-api-key": deps.anthropic_api_key,
        },
        json={
            "model": deps.token_count_model,
            "messages": [{"role": "user", "content": text}],
        },
        timeout=deps.http_timeout,
    )
    resp.raise_for_status()
    try:
        tokens = resp.json()["input_tokens"]
    except (ValueError, KeyError, TypeError) as e:
        raise TokenCountError(f"unexpected response body: {resp.text[:200]!r}") from e
    if not isinstance(tokens, int) or tokens < 0:
        raise TokenCountError(f"invalid input_tokens value: {tokens!r}")
    return tokens


async def _count_one(client: httpx.AsyncClient, request: CountRequest, deps: SyncDeps) -> tuple[str, int]:
    try:
        return request.filename, await count_tokens(client, request.text, deps)
    except httpx.HTTPError as e:
        failure = classify_http_error(service="count_tokens", target=request.filename, error=e)
        kind = "transient" if failure.transient else "permanent"
        logger.error(f"Error counting tokens for {request.filename} ({kind}): {failure.message}")
    except TokenCountError as e:
        logger.error(f"Error counting tokens for {request.filename}: {e}")
    return request.filename, 0


async def count_tokens_batch(
    client: httpx.AsyncClient,
    requests: list[CountRequest],
    deps: SyncDeps,
) -> dict[str, int]:
    """Count tokens for every request, ``deps.batch_size`` at a time.

    Results are merged only after a whole batch completes.
    """
    results: dict[str, int] = {}
    batch_size = max(1, deps.batch_size)

    for start in range(0, len(requests), batch_size):
        batch = requests[start:start + batch_size]
        batch_results = await asyncio.gather(*(_count_one(client, r, deps) for r in batch))
        results.update(batch_results)

        if start + batch_size < len(requests):
            await asyncio.sleep(deps.batch_delay_seconds)

    return results


def parse_published_counts(index_text: str) -> dict[str, int]:
    """Map filename -> token count from the entry lines of an index document."""
    return {
        match.group(1): int(match.group(2))
        for match in _TOKEN_ENTRY_RE.finditer(index_text)
    }

