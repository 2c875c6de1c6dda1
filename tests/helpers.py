"""Test doubles for the embedding, completion and audit collaborators."""

import asyncio
import json
from typing import Any, Dict, List, Sequence

import numpy as np

from core.entities import EmbeddedFragment, ScoredClause
from core.similarity_index import SimilarityIndex

EXTRACT_MARKER = "strict JSON extractor"


def fragment(dataset: str, fid: str, text: str, vec: Sequence[float]) -> EmbeddedFragment:
    return EmbeddedFragment(
        dataset=dataset, id=fid, text=text, embedding=np.asarray(vec, dtype=float)
    )


def index_of(*fragments: EmbeddedFragment) -> SimilarityIndex:
    return SimilarityIndex(list(fragments))


def clause(ref: str, score: float = 0.9, text: str = "Room rent is capped at 1% of sum insured.") -> ScoredClause:
    return ScoredClause(dataset="policy.pdf", clause_ref=ref, excerpt=text, score=score)


def fixed_embed(vec: Sequence[float]):
    calls: List[str] = []

    async def embed(text: str):
        calls.append(text)
        return np.asarray(vec, dtype=float)

    embed.calls = calls  # type: ignore[attr-defined]
    return embed


class FakeCompletion:
    """
    Routes by prompt: the extraction prompt gets `extract`, anything else
    gets `decide`. A BaseException value is raised instead of returned.
    """

    def __init__(self, extract: Any = "", decide: Any = "") -> None:
        self.extract = extract
        self.decide = decide
        self.calls: List[Dict[str, Any]] = []

    async def __call__(self, prompt: str, *, temperature: float = 0.0, max_tokens: int = 800) -> str:
        self.calls.append({"prompt": prompt, "temperature": temperature, "max_tokens": max_tokens})
        value = self.extract if EXTRACT_MARKER in prompt else self.decide
        if isinstance(value, BaseException):
            raise value
        return value

    def prompts(self, kind: str) -> List[str]:
        is_extract = kind == "extract"
        return [c["prompt"] for c in self.calls if (EXTRACT_MARKER in c["prompt"]) == is_extract]


class FakeAudit:
    def __init__(self, error: Exception | None = None) -> None:
        self.records: list = []
        self.error = error

    async def append(self, record) -> int:
        if self.error is not None:
            raise self.error
        self.records.append(record)
        return len(self.records)


def decision_json(status: str = "Approved", clauses_used: Any = None, **decision: Any) -> str:
    body = {
        "parsed_query": {"age": 46, "gender": "male", "procedure": "knee surgery"},
        "decision": {
            "status": status,
            "amount": decision.get("amount"),
            "justification": decision.get(
                "justification",
                "CLAUSE_1 covers the procedure. The waiting period has elapsed. "
                "No exclusion applies. The claim is therefore payable.",
            ),
        },
    }
    if clauses_used is not None:
        body["clauses_used"] = clauses_used
    return json.dumps(body)


class HangingAudit:
    """An audit store that accepts the write and never answers."""

    def __init__(self) -> None:
        self.started = 0

    async def append(self, record) -> int:
        self.started += 1
        await asyncio.Event().wait()
        return 0
