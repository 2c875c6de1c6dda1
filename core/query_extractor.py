# core/query_extractor.py
import json
from pydantic import ValidationError
from config.settings import settings
from core.entities import ParseOutcome
from core.llm_client import CompletionTimeout
from model.decision import StructuredQuery
from util import functions
from util.types import CompletionFn
import logging

logger = logging.getLogger(__name__)


def build_extraction_prompt(query_text: str) -> str:
    return f'{settings.EXTRACT_PROMPT}Now parse exactly:\n"""{query_text}"""\n'


def parse_structured_query(raw: str | None) -> ParseOutcome[StructuredQuery]:
    """
    Parse fenced-or-bare JSON into a StructuredQuery.
    Anything that is not a JSON object falls back to an empty query.
    """
    text = functions.strip_code_fences(raw)
    if not text:
        return ParseOutcome(StructuredQuery(), fallback=True, reason="empty")
    try:
        data = json.loads(text)
    except (ValueError, RecursionError):
        return ParseOutcome(StructuredQuery(), fallback=True, reason="invalid_json")
    if not isinstance(data, dict):
        return ParseOutcome(StructuredQuery(), fallback=True, reason="not_object")
    try:
        return ParseOutcome(StructuredQuery.model_validate(data))
    except ValidationError:
        return ParseOutcome(StructuredQuery(), fallback=True, reason="invalid_fields")


async def extract_structured_query(
    query_text: str, complete: CompletionFn
) -> StructuredQuery:
    """
    Best-effort extraction: malformed output or a timeout yields an empty
    StructuredQuery. Transport/HTTP errors from `complete` propagate.
    """
    prompt = build_extraction_prompt(query_text)
    try:
        raw = await complete(
            prompt, temperature=0.0, max_tokens=settings.EXTRACT_MAX_TOKENS
        )
    except CompletionTimeout:
        logger.warning("extract.fallback reason=timeout")
        return StructuredQuery()

    outcome = parse_structured_query(raw)
    if outcome.fallback:
        logger.warning("extract.fallback reason=%s", outcome.reason)
    else:
        filled = [k for k, v in outcome.value.model_dump().items() if v is not None]
        logger.info("extract.ok fields=%s", ",".join(filled) or "-")
    return outcome.value
