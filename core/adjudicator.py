# core/adjudicator.py
import json
from typing import Any, List, Sequence
from pydantic import ValidationError
from config.settings import settings
from core.entities import ParseOutcome, ScoredClause
from core.llm_client import CompletionTimeout
from model.decision import (
    Decision,
    DecisionResult,
    DecisionStatus,
    StructuredQuery,
    UsedClause,
)
from util import functions
from util.types import CompletionFn
import logging

logger = logging.getLogger(__name__)

FALLBACK_JUSTIFICATION = "Could not parse LLM output"


def render_clauses(clauses: Sequence[ScoredClause]) -> str:
    """
    Number clauses from 1 in retrieval order; the justification cites these numbers.
    """
    if not clauses:
        return "(no clauses retrieved)"
    return "\n".join(
        f"CLAUSE_{i} ({c.dataset} / {c.clause_ref}):\n{c.excerpt}"
        for i, c in enumerate(clauses, start=1)
    )


def build_decision_prompt(
    structured_query: StructuredQuery, clauses: Sequence[ScoredClause]
) -> str:
    return (
        f"{settings.DECISION_PROMPT}"
        f"Parsed query:\n{json.dumps(structured_query.model_dump(), indent=2)}\n"
        f"Clauses:\n{render_clauses(clauses)}\n"
    )


def evidence_as_used(clauses: Sequence[ScoredClause]) -> List[UsedClause]:
    return [
        UsedClause(
            dataset=c.dataset,
            clause_ref=c.clause_ref,
            excerpt=c.excerpt,
            score=c.score,
        )
        for c in clauses
    ]


def fallback_result(
    structured_query: StructuredQuery, evidence: Sequence[ScoredClause]
) -> DecisionResult:
    return DecisionResult(
        parsed_query=structured_query,
        decision=Decision(
            status=DecisionStatus.pending,
            amount=None,
            justification=FALLBACK_JUSTIFICATION,
        ),
        clauses_used=evidence_as_used(evidence),
    )


def _echoed_query(echo: Any, supplied: StructuredQuery) -> StructuredQuery:
    if not isinstance(echo, dict):
        return supplied
    try:
        return StructuredQuery.model_validate(echo)
    except ValidationError:
        return supplied


def _reported_clauses(raw: Any) -> List[UsedClause]:
    # Entries that do not fit the clause shape are dropped one by one.
    if not isinstance(raw, list):
        return []
    out: List[UsedClause] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        try:
            out.append(UsedClause.model_validate({**item, "score": None}))
        except ValidationError:
            continue
    return out


def parse_decision_output(
    raw: str | None,
    structured_query: StructuredQuery,
    evidence: Sequence[ScoredClause],
) -> ParseOutcome[DecisionResult]:
    """
    Parse the adjudication answer.

    Fences are stripped and parsing starts at the first '{'. A missing object,
    invalid JSON or a decision outside the schema (including an unknown
    status) gives the synthetic Pending result. On success, an empty or
    missing `clauses_used` is replaced by the supplied evidence.
    """
    text = functions.from_first_brace(functions.strip_code_fences(raw))
    if text is None:
        return ParseOutcome(
            fallback_result(structured_query, evidence), fallback=True, reason="no_object"
        )
    try:
        data = json.loads(text)
    except (ValueError, RecursionError):
        return ParseOutcome(
            fallback_result(structured_query, evidence),
            fallback=True,
            reason="invalid_json",
        )
    if not isinstance(data, dict):
        return ParseOutcome(
            fallback_result(structured_query, evidence),
            fallback=True,
            reason="not_object",
        )
    try:
        decision = Decision.model_validate(data.get("decision"))
    except ValidationError:
        return ParseOutcome(
            fallback_result(structured_query, evidence),
            fallback=True,
            reason="invalid_decision",
        )

    clauses_used = _reported_clauses(data.get("clauses_used"))
    if not clauses_used:
        logger.info("adjudicate.repair clauses_used=evidence n=%d", len(evidence))
        clauses_used = evidence_as_used(evidence)

    return ParseOutcome(
        DecisionResult(
            parsed_query=_echoed_query(data.get("parsed_query"), structured_query),
            decision=decision,
            clauses_used=clauses_used,
        )
    )


async def adjudicate(
    structured_query: StructuredQuery,
    evidence: Sequence[ScoredClause],
    complete: CompletionFn,
) -> DecisionResult:
    """
    Ask the model for a grounded decision over `evidence`.
    Always returns a well-formed DecisionResult unless `complete` itself fails
    with a transport/HTTP error; a timeout gives the Pending fallback.
    """
    prompt = build_decision_prompt(structured_query, evidence)
    try:
        raw = await complete(
            prompt, temperature=0.0, max_tokens=settings.DECISION_MAX_TOKENS
        )
    except CompletionTimeout:
        logger.warning("adjudicate.fallback reason=timeout")
        return fallback_result(structured_query, evidence)

    outcome = parse_decision_output(raw, structured_query, evidence)
    if outcome.fallback:
        logger.warning("adjudicate.fallback reason=%s", outcome.reason)
    else:
        logger.info(
            "adjudicate.ok status=%s clauses=%d",
            outcome.value.decision.status.value,
            len(outcome.value.clauses_used),
        )
    return outcome.value
