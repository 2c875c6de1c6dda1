# core/clause_retriever.py
from typing import List, Optional, Sequence, Tuple
from config.settings import settings
from core.entities import EmbeddedFragment, ScoredClause
from core.similarity_index import SimilarityIndex
from util.timing import timed
from util.types import EmbedFn
import logging

logger = logging.getLogger(__name__)


def _to_clause(fragment: EmbeddedFragment, score: float) -> ScoredClause:
    return ScoredClause(
        dataset=fragment.dataset,
        clause_ref=fragment.id,
        excerpt=fragment.text,
        score=score,
    )


def select_clauses(
    scored: Sequence[Tuple[EmbeddedFragment, float]],
    *,
    top_k: int,
    min_similarity: float,
    min_excerpt_chars: int,
) -> Tuple[List[ScoredClause], bool]:
    """
    Apply the evidence selection policy to `scored` (already sorted best first).

    Primary: score >= min_similarity, first `top_k`, then drop excerpts shorter
    than `min_excerpt_chars` once trimmed.
    Fallback (primary empty): first `top_k` by raw score, no filters.

    Returns (clauses, used_fallback).
    """
    primary = [_to_clause(f, s) for f, s in scored if s >= min_similarity][:top_k]
    primary = [c for c in primary if len(c.excerpt.strip()) >= min_excerpt_chars]
    if primary:
        return primary, False
    return [_to_clause(f, s) for f, s in scored[:top_k]], True


async def retrieve_clauses(
    query_text: str,
    index: SimilarityIndex,
    embed: EmbedFn,
    *,
    top_k: Optional[int] = None,
    min_similarity: Optional[float] = None,
) -> List[ScoredClause]:
    """
    Embed the query, rank the whole index and select at most `top_k` clauses.
    An empty index means no evidence, not an error.
    """
    k = settings.TOP_K if top_k is None else top_k
    threshold = settings.MIN_SIMILARITY if min_similarity is None else min_similarity

    if not len(index):
        logger.warning("retrieve.empty_index")
        return []

    with timed(logger, "retrieve.embed"):
        vector = await embed(query_text)
    with timed(logger, "retrieve.rank", n=len(index)):
        scored = index.nearest(vector)

    clauses, used_fallback = select_clauses(
        scored,
        top_k=k,
        min_similarity=threshold,
        min_excerpt_chars=settings.MIN_EXCERPT_CHARS,
    )
    if used_fallback:
        logger.warning(
            "retrieve.fallback count=%d best=%.3f threshold=%.2f",
            len(clauses),
            scored[0][1] if scored else 0.0,
            threshold,
        )
    else:
        logger.info("retrieve.primary count=%d best=%.3f", len(clauses), clauses[0].score)
    return clauses
