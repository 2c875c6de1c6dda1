# core/similarity_index.py
import json
import os
from typing import Any, List, Sequence, Tuple
import numpy as np
from core.entities import EmbeddedFragment
from util.timing import timed
import logging

logger = logging.getLogger(__name__)

EPS = 1e-10


def cosine(a: Sequence[float], b: Sequence[float]) -> float:
    """
    dot(a, b) / (|a| * |b| + EPS). Zero vectors score 0 instead of NaN.
    """
    va = np.asarray(a, dtype=np.float64).ravel()
    vb = np.asarray(b, dtype=np.float64).ravel()
    return float(np.dot(va, vb) / (np.linalg.norm(va) * np.linalg.norm(vb) + EPS))


class SimilarityIndex:
    """
    Read-only collection of embedded fragments, loaded once at startup.
    Safe to share between concurrent requests: nothing mutates it after init.
    """

    def __init__(self, fragments: Sequence[EmbeddedFragment] = ()) -> None:
        self._fragments: Tuple[EmbeddedFragment, ...] = tuple(fragments)
        if self._fragments:
            matrix = np.vstack(
                [np.asarray(f.embedding, dtype=np.float64) for f in self._fragments]
            )
        else:
            matrix = np.zeros((0, 0), dtype=np.float64)
        matrix.setflags(write=False)
        self._matrix = matrix
        self._norms = np.linalg.norm(matrix, axis=1) if matrix.size else np.zeros(0)

    def __len__(self) -> int:
        return len(self._fragments)

    @property
    def fragments(self) -> Tuple[EmbeddedFragment, ...]:
        return self._fragments

    def nearest(
        self, query_vector: Sequence[float]
    ) -> List[Tuple[EmbeddedFragment, float]]:
        """
        Score every fragment against `query_vector` and return all of them,
        best first. Equal scores keep collection order.
        """
        if not self._fragments:
            return []
        q = np.asarray(query_vector, dtype=np.float64).ravel()
        sims = (self._matrix @ q) / (self._norms * np.linalg.norm(q) + EPS)
        order = np.argsort(-sims, kind="stable")
        return [(self._fragments[int(i)], float(sims[int(i)])) for i in order]


def _fragment_from_record(rec: Any) -> EmbeddedFragment:
    if not isinstance(rec, dict):
        raise ValueError("fragment record is not an object")
    embedding = np.asarray(rec["embedding"], dtype=np.float64)
    if embedding.ndim != 1 or embedding.size == 0:
        raise ValueError("fragment embedding is not a flat vector")
    return EmbeddedFragment(
        dataset=str(rec["dataset"]),
        id=str(rec["id"]),
        text=str(rec.get("text") or ""),
        embedding=embedding,
    )


def parse_collection(records: Any) -> List[EmbeddedFragment]:
    """
    Validate a decoded embeddings collection. Raises ValueError/KeyError/TypeError
    on anything that is not a list of same-length {dataset, id, text, embedding}.
    """
    if not isinstance(records, list):
        raise ValueError("embeddings collection is not a list")
    fragments = [_fragment_from_record(r) for r in records]
    dims = {f.embedding.shape[0] for f in fragments}
    if len(dims) > 1:
        raise ValueError(f"mixed embedding dimensions: {sorted(dims)}")
    return fragments


def load_index(path: str) -> SimilarityIndex:
    """
    Load the pre-built collection from `path`.
    A missing or unreadable file yields an empty index (retrieval then returns
    no clauses) rather than stopping the service.
    """
    if not os.path.exists(path):
        logger.warning("index.missing path=%s (run index_pdfs.py)", path)
        return SimilarityIndex()
    try:
        with timed(logger, "index.load"):
            with open(path, "r", encoding="utf-8") as fh:
                fragments = parse_collection(json.load(fh))
    except (OSError, ValueError, KeyError, TypeError) as e:
        logger.warning(
            "index.unreadable path=%s err=%s (re-run index_pdfs.py)",
            path,
            type(e).__name__,
        )
        return SimilarityIndex()
    logger.info("index.loaded fragments=%d", len(fragments))
    return SimilarityIndex(fragments)
