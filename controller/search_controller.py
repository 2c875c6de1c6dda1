# controller/search_controller.py
from fastapi import APIRouter, Depends, Request
from fastapi_limiter.depends import RateLimiter
from config.settings import settings
from controller.controller_dependencies import get_claim_service, get_index
from model.api import ErrorResponse, HealthResponse, SearchRequest
from model.decision import DecisionResult
from service.claim_service import ClaimService
from util.constants import InternalURIs

search_limiter = RateLimiter(
    times=settings.RATE_LIMIT_TIMES, seconds=settings.RATE_LIMIT_SECONDS
)

search_router = APIRouter(dependencies=[Depends(search_limiter)])

health_router = APIRouter()


@search_router.post(
    InternalURIs.SEARCH,
    response_model=DecisionResult,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def search(
    payload: SearchRequest,
    service: ClaimService = Depends(get_claim_service),
) -> DecisionResult:
    return await service.handle(payload.query)


@health_router.get(InternalURIs.HEALTHZ, response_model=HealthResponse)
async def healthz(request: Request) -> HealthResponse:
    return HealthResponse(ok=True, fragments=len(get_index(request)))
