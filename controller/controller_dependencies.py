# controller/controller_dependencies.py
from fastapi import Request
from core.similarity_index import SimilarityIndex
from repository.audit_repository import AuditRepository
from service.claim_service import ClaimService


def get_index(request: Request) -> SimilarityIndex:
    index = getattr(request.app.state, "index", None)
    return index if index is not None else SimilarityIndex()


def get_claim_service(request: Request) -> ClaimService:
    return ClaimService(index=get_index(request), audit=AuditRepository())
