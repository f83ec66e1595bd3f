# =============================================================================
# WordChef Client - Query Session
# =============================================================================
# Runs the "get nearest images" action: nearest neighbors for the query,
# then bulk images for exactly those neighbor words. Each user action is one
# background task returning a Future; the displayed state is only written by
# that task's completion step. Overlapping submissions are not coordinated
# or cancelled.
# =============================================================================

import dataclasses
import logging
import re
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from shared.schemas import NeighborResult
from wordchef.api import DEFAULT_LIMIT, MAX_LIMIT, WordChefClient
from wordchef.errors import WordChefError
from wordchef.images import ImageResult

logger = logging.getLogger(__name__)

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def parse_limit(text: Optional[str], default: int = DEFAULT_LIMIT, max_limit: int = MAX_LIMIT) -> int:
    """
    Parse the neighbor count typed by the user.

    Only a plain optionally-signed integer is accepted; anything else
    (empty, padded with spaces, decimals) falls back to ``default``. The
    result is clamped to [1, max_limit].
    """
    if text is not None and _INTEGER_RE.fullmatch(text):
        limit = int(text)
    else:
        limit = default
    return max(1, min(limit, max_limit))


@dataclass
class QueryState:
    """
    What the user currently sees.

    Attributes:
        is_loading:    True while a fetch sequence is running.
        error_message: Last error text, or None.
        neighbors:     Neighbors from the last successful query.
        images:        Word -> image from the last successful query.
    """

    is_loading: bool = False
    error_message: Optional[str] = None
    neighbors: List[NeighborResult] = field(default_factory=list)
    images: Dict[str, ImageResult] = field(default_factory=dict)

    def sorted_images(self) -> List[ImageResult]:
        """Images ordered by word, the order they are displayed in."""
        return [self.images[word] for word in sorted(self.images)]


class QuerySession:
    """
    Holds the result state and runs query actions against a WordChefClient.

    Args:
        client:        The API client to use.
        default_limit: Neighbor count used when the limit text is not a number.
        max_limit:     Upper bound for the neighbor count.
    """

    def __init__(
        self,
        client: WordChefClient,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int = MAX_LIMIT,
    ):
        self._client = client
        self._default_limit = default_limit
        self._max_limit = max_limit
        self._state = QueryState()
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="wordchef-query")

    @property
    def state(self) -> QueryState:
        """A snapshot copy of the current state."""
        with self._lock:
            return dataclasses.replace(
                self._state,
                neighbors=list(self._state.neighbors),
                images=dict(self._state.images),
            )

    def _begin(self) -> None:
        with self._lock:
            self._state.is_loading = True
            self._state.error_message = None

    def _complete(
        self,
        neighbors: Optional[List[NeighborResult]] = None,
        images: Optional[Dict[str, ImageResult]] = None,
        error: Optional[str] = None,
    ) -> None:
        """Completion step: the only place the displayed results change."""
        with self._lock:
            self._state.is_loading = False
            self._state.error_message = error
            if error is None:
                self._state.neighbors = list(neighbors or [])
                self._state.images = dict(images or {})

    def run(self, query: str, limit_text: Optional[str] = None) -> QueryState:
        """
        Fetch nearest neighbors for ``query`` and bulk images for them.

        Errors are converted to ``error_message``; the previously displayed
        neighbors and images are kept when the action fails.

        Args:
            query:      Free-text word(s) typed by the user.
            limit_text: Neighbor count as typed, default 5.

        Returns:
            A snapshot of the state after the action completes.
        """
        self._begin()
        limit = parse_limit(limit_text, self._default_limit, self._max_limit)

        try:
            _, neighbors = self._client.fetch_nearest(query, limit)
            words = [n.word for n in neighbors]
            logger.info("Fetching images for %d neighbors: %s", len(words), ", ".join(words))
            images = self._client.fetch_bulk_images(words)
        except WordChefError as exc:
            logger.warning("Query %r failed: %s", query, exc)
            self._complete(error=str(exc))
        except Exception as exc:
            logger.exception("Unexpected failure for query %r", query)
            self._complete(error=f"Failed to fetch nearest: {exc}")
        else:
            self._complete(neighbors=neighbors, images=images)

        return self.state

    def submit(self, query: str, limit_text: Optional[str] = None) -> "Future[QueryState]":
        """
        Run ``run`` on a background worker.

        A new submission does not cancel one already in flight.

        Returns:
            Future resolving to the state snapshot after completion.
        """
        return self._executor.submit(self.run, query, limit_text)

    def close(self) -> None:
        """Wait for in-flight actions and stop the worker threads."""
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "QuerySession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
