# =============================================================================
# WordChef Client - Shared API Schemas
# =============================================================================
# Pydantic models defining the JSON contracts of the WordChef web service.
# These schemas validate the bodies returned by the nearest, image and
# bulk_image endpoints before the client turns them into result objects.
#
# Embeddings travel as plain JSON arrays of doubles; images travel as base64
# strings that the client decodes into displayable bitmaps.
# =============================================================================

from typing import Dict, List, Optional

import numpy as np
from pydantic import BaseModel, Field, RootModel, model_validator


class EmbeddingResult(BaseModel):
    """
    The ``input`` section of a nearest response: the echoed query words and
    one embedding vector per word.

    Attributes:
        words:             Query words in the order the server echoed them.
        embeddings:        One float vector per word, same order as ``words``.
        average_embedding: Optional mean of the per-word embeddings.
    """

    words: List[str] = Field(..., description="Echoed query words")
    embeddings: List[List[float]] = Field(..., description="Per-word embedding vectors")
    average_embedding: Optional[List[float]] = Field(
        default=None,
        description="Mean embedding over all query words",
    )

    @model_validator(mode="after")
    def check_lengths(self) -> "EmbeddingResult":
        if len(self.words) != len(self.embeddings):
            raise ValueError(
                f"{len(self.words)} words but {len(self.embeddings)} embeddings"
            )
        return self

    def embedding_matrix(self) -> np.ndarray:
        """
        Stack the per-word embeddings into a float64 matrix.

        Returns:
            numpy array of shape (len(words), dim).
        """
        return np.asarray(self.embeddings, dtype=np.float64)


class NeighborResult(BaseModel):
    """
    A single nearest-neighbor entry.

    Attributes:
        word:      The neighboring word.
        distance:  Distance from the query embedding.
        embedding: The neighbor's embedding vector.
    """

    word: str
    distance: float
    embedding: List[float] = Field(default_factory=list)

    def vector(self) -> np.ndarray:
        return np.asarray(self.embedding, dtype=np.float64)


class NearestResponse(BaseModel):
    """Body of ``GET /api/nearest.php``."""

    input: EmbeddingResult
    nearest: List[NeighborResult] = Field(default_factory=list)


class SingleImageResponse(BaseModel):
    """
    Body of ``GET /api/image.php``.

    Attributes:
        label:        Word (or words) the image was generated for.
        image_base64: Base64-encoded image file bytes.
    """

    label: str
    image_base64: str


class BulkImageResponse(RootModel[Dict[str, str]]):
    """Body of ``POST /api/bulk_image.php``: a flat word -> base64 mapping."""
