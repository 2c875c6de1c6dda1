# core/embedder.py
import asyncio
import threading
from typing import Optional, Sequence
import numpy as np
from sentence_transformers import SentenceTransformer
from config.settings import settings
from util.timing import timed
import logging

logger = logging.getLogger(__name__)

_model: Optional[SentenceTransformer] = None
_model_lock = threading.Lock()


def load_model() -> SentenceTransformer:
    """
    Process-wide sentence embedding model, created on first use.
    The lock keeps concurrent first callers from loading it twice.
    """
    global _model
    if _model is None:
        with _model_lock:
            if _model is None:
                name = settings.EMBEDDING_MODEL_NAME
                with timed(logger, "embed.model.load", model=name):
                    _model = SentenceTransformer(name, device="cpu")
    return _model


def embed_texts(texts: Sequence[str], batch_size: int = 64) -> np.ndarray:
    """
    Encode `texts` into an (n, d) float32 matrix of L2-normalized vectors.
    """
    model = load_model()
    with timed(logger, "embed.encode", n=len(texts), batch=batch_size):
        vecs = model.encode(
            list(texts),
            batch_size=batch_size,
            convert_to_numpy=True,
            normalize_embeddings=True,
        )
    return vecs.astype(np.float32, copy=False)


def embed_text(text: str) -> np.ndarray:
    return embed_texts([text])[0]


async def embed_query(text: str) -> np.ndarray:
    # Encoding is CPU-bound; keep it off the event loop.
    return await asyncio.to_thread(embed_text, text)
