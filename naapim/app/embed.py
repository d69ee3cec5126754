#!/usr/bin/env python3
"""
Embedding module for the Naapim decision backend.

This module handles text embedding using sentence-transformers. The model is
loaded on first use so the API starts without it.
"""

import numpy as np
from typing import List, Optional
from .config import Config
from ..utils.logger import get_logger

logger = get_logger()


class EmbeddingClient:
    """Client for generating text embeddings using sentence-transformers."""

    def __init__(self, model_name: str = None):
        self.model_name = model_name or Config.EMBEDDING_MODEL
        self._model = None

    @property
    def model(self):
        if self._model is None:
            from sentence_transformers import SentenceTransformer
            logger.info(f"[EMBED] Loading {self.model_name}")
            self._model = SentenceTransformer(self.model_name)
        return self._model

    def generate_embedding(self, text: str) -> List[float]:
        """
        Generate embedding for a text string.

        Args:
            text: Text to embed

        Returns:
            Embedding vector as a list of floats
        """
        embedding = self.model.encode(text)
        return embedding.tolist()


def cosine_similarities(query: List[float], vectors: List[List[float]]) -> np.ndarray:
    """Cosine similarity of one query vector against each row; zero vectors score 0."""
    if not vectors:
        return np.zeros(0)
    q = np.asarray(query, dtype=np.float32)
    m = np.asarray(vectors, dtype=np.float32)
    norms = np.linalg.norm(m, axis=1) * np.linalg.norm(q)
    dots = m @ q
    return np.divide(dots, norms, out=np.zeros_like(dots), where=norms > 0)


def build_embedder() -> Optional[EmbeddingClient]:
    """Return an embedder, or None when embeddings are switched off."""
    if not Config.USE_EMBEDDINGS:
        logger.info("[EMBED] Embeddings disabled")
        return None
    return EmbeddingClient()
