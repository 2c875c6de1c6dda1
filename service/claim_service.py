# service/claim_service.py
import asyncio
import logging
from typing import Optional
import httpx
from config.settings import settings
from core import embedder, llm_client
from core.adjudicator import adjudicate
from core.clause_retriever import retrieve_clauses
from core.query_extractor import extract_structured_query
from core.similarity_index import SimilarityIndex
from model.decision import AuditRecord, DecisionResult
from repository.audit_repository import AuditRepository
from util.enums import ErrorMessage
from util.errors import AppError
from util.timing import timed
from util.types import CompletionFn, EmbedFn

logger = logging.getLogger(__name__)


class ClaimService:
    def __init__(
        self,
        index: SimilarityIndex,
        audit: AuditRepository,
        complete: CompletionFn = llm_client.complete,
        embed: EmbedFn = embedder.embed_query,
        audit_timeout: Optional[float] = None,
    ) -> None:
        self._index = index
        self._audit = audit
        self._complete = complete
        self._embed = embed
        self._audit_timeout = (
            settings.AUDIT_TIMEOUT_SECONDS if audit_timeout is None else audit_timeout
        )

    async def handle(self, query: str) -> DecisionResult:
        """
        Extraction and retrieval run concurrently; adjudication waits for both.
        The audit entry is written after the result exists and never fails
        the request.
        Logs: sizes, statuses and timings only (no query text).
        """
        logger.info("search.start chars=%d fragments=%d", len(query), len(self._index))
        try:
            with timed(logger, "search.pipeline"):
                structured, clauses = await asyncio.gather(
                    extract_structured_query(query, self._complete),
                    retrieve_clauses(query, self._index, self._embed),
                )
                result = await adjudicate(structured, clauses, self._complete)
        except httpx.HTTPError as e:
            logger.error("search.upstream.error err=%s", type(e).__name__)
            raise AppError.of(ErrorMessage.UPSTREAM_UNAVAILABLE) from e

        await self._record(query, result)
        logger.info(
            "search.ok status=%s clauses=%d",
            result.decision.status.value,
            len(result.clauses_used),
        )
        return result

    async def _record(self, query: str, result: DecisionResult) -> None:
        try:
            # Bounded: a stalled audit store must not hold the response.
            await asyncio.wait_for(
                self._audit.append(AuditRecord.from_result(query, result)),
                timeout=self._audit_timeout,
            )
        except Exception as e:
            logger.warning("audit.append.error err=%s", type(e).__name__)
