# core/entities.py
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar
import numpy as np

T = TypeVar("T")


@dataclass(frozen=True, eq=False)
class EmbeddedFragment:
    """
    One pre-embedded chunk of a source document.
    `id` is unique within `dataset`.
    """

    dataset: str
    id: str
    text: str
    embedding: np.ndarray  # (d,) float


@dataclass(frozen=True)
class ScoredClause:
    dataset: str
    clause_ref: str
    excerpt: str
    score: float


@dataclass(frozen=True)
class ParseOutcome(Generic[T]):
    """
    Result of parsing untrusted model output: either the parsed value, or the
    stage's fallback value with `fallback=True` and a short `reason`.
    """

    value: T
    fallback: bool = False
    reason: Optional[str] = None
