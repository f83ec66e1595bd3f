# =============================================================================
# WordChef Client - HTTP API Client
# =============================================================================
# Provides the WordChefClient class responsible for querying the WordChef
# word-embedding service: nearest neighbors with embeddings, single images
# and bulk images. Each call is one HTTP round trip whose JSON body is
# validated against the shared schemas. No retries, no pagination.
# =============================================================================

import logging
from typing import Dict, List, Optional, Sequence, Tuple, Union
from urllib.parse import quote

import requests
from pydantic import BaseModel, ValidationError

from shared.schemas import (
    BulkImageResponse,
    EmbeddingResult,
    NearestResponse,
    NeighborResult,
    SingleImageResponse,
)
from wordchef.errors import (
    DecodeError,
    EmptyResultError,
    InvalidInputError,
    ServerError,
    TransportError,
)
from wordchef.images import ImageResult, decode_image_strict, decode_images_skip_invalid

logger = logging.getLogger(__name__)

Words = Union[str, Sequence[str]]

DEFAULT_LIMIT = 5
MAX_LIMIT = 20


def clamp_limit(limit: Optional[int], max_limit: int = MAX_LIMIT) -> int:
    """
    Clamp a neighbor count into [1, max_limit], defaulting to DEFAULT_LIMIT.

    Args:
        limit:     Requested neighbor count, or None for the default.
        max_limit: Upper bound accepted by the service.

    Returns:
        The clamped neighbor count.
    """
    if limit is None:
        limit = DEFAULT_LIMIT
    return max(1, min(int(limit), max_limit))


def normalize_words(words: Words) -> str:
    """
    Turn the user's words into the query text sent to the service.

    A string is sent as typed; a sequence is joined with single spaces.

    Raises:
        InvalidInputError: If there is nothing to query.
    """
    if isinstance(words, str):
        text = words.strip()
    else:
        text = " ".join(w.strip() for w in words if w and w.strip())

    if not text:
        raise InvalidInputError("Invalid words input")
    return text


class WordChefClient:
    """
    HTTP client for the WordChef nearest/image/bulk_image endpoints.

    Args:
        base_url:  Base URL of the service (e.g., "https://wordchef.app").
        api_key:   API key sent as ``X-API-Key`` (or ``api_key`` for bulk
                   images). An empty key is sent as-is; the server rejects it.
        timeout:   Per-request timeout in seconds, or None for no timeout.
        max_limit: Largest neighbor count the service accepts.
        session:   Optional pre-built requests.Session (used by tests).
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = "",
        timeout: Optional[float] = None,
        max_limit: int = MAX_LIMIT,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key or ""
        self._timeout = timeout
        self._max_limit = max_limit
        self._session = session if session is not None else requests.Session()

    @property
    def api_key(self) -> str:
        return self._api_key

    @api_key.setter
    def api_key(self, value: Optional[str]) -> None:
        self._api_key = value or ""

    def close(self) -> None:
        self._session.close()

    # -----------------------------------------------------------------
    # Request plumbing
    # -----------------------------------------------------------------

    def _url(self, path: str, **query: str) -> str:
        """Build ``base_url + path`` with each query value percent-encoded."""
        params = "&".join(f"{name}={quote(str(value), safe='')}" for name, value in query.items())
        return f"{self._base_url}{path}?{params}" if params else f"{self._base_url}{path}"

    def _send(self, endpoint: str, method: str, url: str, **kwargs) -> requests.Response:
        """
        Issue one request and enforce a 200 status.

        Raises:
            TransportError: On connection-level failure.
            ServerError:    On any non-200 status.
        """
        try:
            response = self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.exceptions.RequestException as exc:
            # The bulk URL carries the API key; keep the exception text out
            logger.warning("%s request failed: %s", endpoint, type(exc).__name__)
            raise TransportError(f"Failed to reach {endpoint} API") from exc

        if response.status_code != 200:
            logger.warning("%s API returned HTTP %d", endpoint, response.status_code)
            raise ServerError(endpoint, response.status_code)
        return response

    @staticmethod
    def _decode(endpoint: str, response: requests.Response, model: type) -> BaseModel:
        try:
            return model.model_validate_json(response.content)
        except ValidationError as exc:
            logger.warning("%s API returned an invalid body: %s", endpoint, exc)
            raise DecodeError(f"Failed to decode {endpoint} response") from exc

    def _get_nearest(self, text: str, limit: Optional[int]) -> NearestResponse:
        query = {"words": text}
        if limit is not None:
            query["limit"] = str(limit)

        url = self._url("/api/nearest.php", **query)
        response = self._send("Nearest", "GET", url, headers={"X-API-Key": self._api_key})
        return self._decode("Nearest", response, NearestResponse)

    # -----------------------------------------------------------------
    # Public operations
    # -----------------------------------------------------------------

    def fetch_embeddings(self, words: Words) -> EmbeddingResult:
        """
        Fetch the embedding of each query word.

        Args:
            words: Query text, or a sequence of words.

        Returns:
            EmbeddingResult with the echoed words and their embeddings.

        Raises:
            InvalidInputError, TransportError, ServerError, DecodeError
        """
        text = normalize_words(words)
        nearest = self._get_nearest(text, limit=None)
        logger.info("Embeddings for %r: %d words", text, len(nearest.input.words))
        return nearest.input

    def fetch_nearest(
        self,
        words: Words,
        limit: Optional[int] = DEFAULT_LIMIT,
    ) -> Tuple[EmbeddingResult, List[NeighborResult]]:
        """
        Fetch the nearest neighbors of the query words.

        Args:
            words: Query text, or a sequence of words.
            limit: Requested neighbor count, clamped to [1, max_limit].

        Returns:
            Tuple of (input embeddings, neighbors). At most the clamped limit
            of neighbors is returned.

        Raises:
            InvalidInputError, TransportError, ServerError, DecodeError,
            EmptyResultError
        """
        text = normalize_words(words)
        capped = clamp_limit(limit, self._max_limit)

        nearest = self._get_nearest(text, limit=capped)
        neighbors = nearest.nearest[:capped]
        if not neighbors:
            raise EmptyResultError("No nearest words found")

        logger.info("Nearest for %r (limit=%d): %d neighbors", text, capped, len(neighbors))
        return nearest.input, neighbors

    def fetch_bulk_images(self, words: Sequence[str]) -> Dict[str, ImageResult]:
        """
        Fetch images for several words in one POST.

        Entries whose base64 fails to decode are logged and dropped; they
        never fail the batch.

        Args:
            words: Words to fetch images for.

        Returns:
            Mapping of word to ImageResult, a subset of ``words``.

        Raises:
            InvalidInputError, TransportError, ServerError, DecodeError
        """
        word_list = [w for w in words if w]
        if not word_list:
            raise InvalidInputError("Invalid words input")

        url = self._url("/api/bulk_image.php", api_key=self._api_key)
        response = self._send("Bulk image", "POST", url, json=word_list)
        body = self._decode("Bulk image", response, BulkImageResponse)

        images = decode_images_skip_invalid(body.root, requested=word_list)
        logger.info("Bulk images: %d requested, %d decoded", len(word_list), len(images))
        return images

    def fetch_single_image(self, words: Words) -> ImageResult:
        """
        Fetch one image for the query words.

        Args:
            words: Query text, or a sequence of words.

        Returns:
            ImageResult labelled with the server's ``label``.

        Raises:
            InvalidInputError, TransportError, ServerError, DecodeError
            (including an undecodable image)
        """
        text = normalize_words(words)
        url = self._url("/api/image.php", words=text)
        response = self._send("Image", "GET", url, headers={"X-API-Key": self._api_key})
        body = self._decode("Image", response, SingleImageResponse)

        result = decode_image_strict(body.image_base64, body.label)
        logger.info("Image for %r: label=%r size=%s", text, body.label, result.size)
        return result
