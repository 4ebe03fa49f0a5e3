import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from cardtracker.api import (
    admin_users_router,
    cards_router,
    collection_router,
    decks_router,
    health_router,
    prices_router,
    timeline_router,
    users_router,
    values_router,
    wishlist_router,
)
from cardtracker.config import settings
from cardtracker.db.database import async_session_factory, init_db
from cardtracker.db.seed import seed_database
from cardtracker.models.failure import (
    PROBLEM_CONTENT_TYPE,
    KnownError,
    MissingUserHeaderError,
    ProblemDetails,
    ValidationFailedError,
    create_problem,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    await init_db()
    if settings.seed_on_startup:
        async with async_session_factory() as session:
            await seed_database(session)
            await session.commit()
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("cardtracker"),
    lifespan=lifespan,
)


def _trace_id(request: Request) -> str:
    return request.headers.get("x-request-id") or uuid4().hex


def problem_response(problem: ProblemDetails) -> JSONResponse:
    return JSONResponse(
        status_code=problem.status,
        content=problem.model_dump(by_alias=True, exclude_none=True),
        media_type=PROBLEM_CONTENT_TYPE,
    )


def _field_name(loc: tuple[int | str, ...]) -> str:
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header")]
    return ".".join(parts) or "request"


@app.exception_handler(KnownError)
async def known_error_handler(request: Request, exc: KnownError) -> JSONResponse:
    return problem_response(exc.to_problem(instance=request.url.path, trace_id=_trace_id(request)))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        errors.setdefault(_field_name(tuple(error["loc"])), []).append(error["msg"])
    problem = ValidationFailedError(errors).to_problem(
        instance=request.url.path, trace_id=_trace_id(request)
    )
    return problem_response(problem)


@app.exception_handler(MissingUserHeaderError)
async def missing_user_handler(_request: Request, exc: MissingUserHeaderError) -> PlainTextResponse:
    return PlainTextResponse(str(exc), status_code=400)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    trace_id = _trace_id(request)
    logger.exception("Unhandled error on %s (trace %s)", request.url.path, trace_id)
    return problem_response(create_problem(500, instance=request.url.path, trace_id=trace_id))


app.include_router(health_router)
app.include_router(users_router)
app.include_router(admin_users_router)
app.include_router(cards_router)
app.include_router(collection_router)
app.include_router(wishlist_router)
app.include_router(decks_router)
app.include_router(prices_router)
app.include_router(timeline_router)
app.include_router(values_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
