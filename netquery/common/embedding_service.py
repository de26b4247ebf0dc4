"""
Embedding Service

On-device query embedding using fastembed.
The model must be the one the upload pipeline used to embed contacts.
"""

import logging
from typing import List, Optional
import numpy as np

logger = logging.getLogger("netquery.common.embedding_service")


class EmbeddingService:
    """
    Embeds query text with a fastembed model.

    The model is loaded lazily on first use so importing the service (and
    constructing the server) stays cheap.
    """

    def __init__(self, model: str = "sentence-transformers/all-MiniLM-L6-v2"):
        self._model_name = model
        self._model = None

    def _ensure_model(self) -> None:
        """Load the fastembed model on first use"""
        if self._model is not None:
            return

        try:
            from fastembed import TextEmbedding
        except ImportError as e:
            raise RuntimeError(f"fastembed is not installed: {e}") from e

        self._model = TextEmbedding(model_name=self._model_name)
        logger.info("Embedding model loaded: %s", self._model_name)

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def is_available(self) -> bool:
        """Check if the embedding model can be loaded"""
        try:
            self._ensure_model()
            return True
        except Exception as e:
            logger.warning("Embedding model unavailable: %s", e)
            return False

    def embed(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for a list of texts.

        Args:
            texts: List of strings to embed

        Returns:
            List of embedding vectors
        """
        if not texts:
            return []

        self._ensure_model()
        embeddings = list(self._model.embed(texts))

        # Ensure consistent return type
        return [e.tolist() if isinstance(e, np.ndarray) else list(e) for e in embeddings]

    def embed_single(self, text: str) -> List[float]:
        """
        Generate embedding for a single text.

        Args:
            text: String to embed

        Returns:
            Embedding vector
        """
        if not text:
            raise ValueError("Cannot embed empty text")

        return self.embed([text])[0]


# Module-level singleton getter
_service_instance: Optional[EmbeddingService] = None


def get_embedding_service(
    model: str = "sentence-transformers/all-MiniLM-L6-v2"
) -> EmbeddingService:
    """
    Get the shared EmbeddingService instance.

    Args:
        model: Model name

    Returns:
        EmbeddingService instance
    """
    global _service_instance

    if _service_instance is None:
        _service_instance = EmbeddingService(model=model)

    return _service_instance
