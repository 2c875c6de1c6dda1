# main.py
import asyncio
from fastapi_limiter import FastAPILimiter
import routes
from contextlib import asynccontextmanager
from util.enums import Environment, Color, ErrorMessage
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware
from config.settings import settings
from config.cache import close_redis, get_redis
from core.embedder import load_model
from core.similarity_index import SimilarityIndex, load_index
from fastapi.responses import JSONResponse
from util.errors import AppError
from util.functions import error_envelope
from util.logger import init_logger
import logging

logger = logging.getLogger(__name__)


async def _real_ip(request: Request) -> str:
    if settings.TRUST_PROXY:
        fwd = request.headers.get("x-forwarded-for")
        if fwd:
            return fwd.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


@asynccontextmanager
async def lifespan(fastApi: FastAPI):
    try:
        init_logger()
        print(f"{Color.GREEN}Initializing...{Color.RESET}")
        redis = await get_redis()
        await FastAPILimiter.init(redis, identifier=_real_ip)
    except Exception as e:
        print("Failed to connect to Redis:", e)
        raise

    # Missing embeddings only degrade retrieval; the model is required.
    fastApi.state.index = load_index(settings.EMBEDDINGS_FILE)
    await asyncio.to_thread(load_model)
    print(
        f"{Color.BLUE}Server Started{Color.RESET} fragments={len(fastApi.state.index)}"
    )

    try:
        yield
    finally:
        try:
            await close_redis()
        except Exception as e:
            print("Error closing Redis:", e)

        print(f"{Color.RED}Server Shutdown{Color.RESET}")


app: FastAPI = FastAPI(lifespan=lifespan)
app.state.index = SimilarityIndex()

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.ALLOWED_ORIGIN],
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Authorization", "Content-Type", "Accept"],
)


@app.exception_handler(RequestValidationError)
async def validation_handler(request: Request, exc: RequestValidationError):
    info = ErrorMessage.INVALID_REQUEST.value
    return JSONResponse(
        status_code=info.http_status,
        content=error_envelope(info.code, info.message),
    )


@app.exception_handler(429)
async def ratelimit_handler(request: Request, exc):
    return JSONResponse(
        status_code=429,
        content=error_envelope(
            "rate_limited", f"Too many requests. Try again in {settings.RATE_LIMIT_SECONDS}s."
        ),
        headers={"Retry-After": str(settings.RATE_LIMIT_SECONDS)},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    code = exc.code if isinstance(exc, AppError) else "http_error"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_handler(request: Request, exc: Exception):
    logger.error("request.unhandled path=%s err=%s", request.url.path, type(exc).__name__)
    return JSONResponse(
        status_code=ErrorMessage.INTERNAL_ERROR.value.http_status,
        content=error_envelope(
            ErrorMessage.INTERNAL_ERROR.value.code,
            str(exc) or ErrorMessage.INTERNAL_ERROR.value.message,
        ),
    )


routes.register_routes(app)

if __name__ == "__main__":
    import uvicorn

    reload = settings.APP_ENV == Environment.DEV
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=reload)
