"""Remote collaborators: token counting and release date lookup."""

from prompt_sync.remote.npm_registry import get_release_date
from prompt_sync.remote.token_count import count_tokens_batch, parse_published_counts

__all__ = [
    "get_release_date",
    "count_tokens_batch",
    "parse_published_counts",
]
