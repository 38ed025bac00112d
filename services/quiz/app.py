"""Quiz service FastAPI application.

`create_app` wires settings, database engine, stores and evaluator explicitly
and exposes them to the routes through `app.state`. Errors are rendered as
`{"error": "<message>"}` bodies.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from packages.common.config import Settings, get_settings
from packages.common.logging import configure_logging
from packages.common.tracing import trace_middleware
from .errors import EvaluationError, InvalidPayload, QuizNotFound, StoreError
from .evaluator import AnswerEvaluator
from .repo import QuestionStore, QuizStore, build_engine, build_sessionmaker, init_db
from .routes import router as quiz_router

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _validation_message(errors: list) -> str:
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def install_error_handlers(app: FastAPI) -> None:
    """Map service, validation and unexpected errors to `{"error": ...}` responses."""

    @app.exception_handler(EvaluationError)
    async def _evaluation(request: Request, exc: EvaluationError) -> JSONResponse:
        return _error(400, exc.message)

    @app.exception_handler(QuizNotFound)
    async def _not_found(request: Request, exc: QuizNotFound) -> JSONResponse:
        return _error(404, exc.message)

    @app.exception_handler(StoreError)
    async def _store(request: Request, exc: StoreError) -> JSONResponse:
        logger.error("store failure", extra={"path": request.url.path, "error": exc.message})
        return _error(500, exc.message)

    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error(400, _validation_message(exc.errors()))

    @app.exception_handler(InvalidPayload)
    async def _invalid_payload(request: Request, exc: InvalidPayload) -> JSONResponse:
        return _error(400, exc.message)

    @app.exception_handler(HTTPException)
    async def _http(request: Request, exc: HTTPException) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled error", extra={"path": request.url.path})
        return _error(500, str(exc) or exc.__class__.__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the Quiz service application.

    Args:
        settings: Explicit settings; defaults to `get_settings()`.

    Returns:
        A FastAPI app whose `state` carries `settings`, `engine`, `quizzes`,
        `questions` and `evaluator`.
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    engine = build_engine(settings)
    sessions = build_sessionmaker(engine)
    questions = QuestionStore(sessions)

    app = FastAPI(title="Quiz Service", version="1.0.0")
    app.state.settings = settings
    app.state.engine = engine
    app.state.quizzes = QuizStore(sessions)
    app.state.questions = questions
    app.state.evaluator = AnswerEvaluator(questions, count_duplicates=settings.SCORING_COUNT_DUPLICATE_ANSWERS)

    app.middleware("http")(trace_middleware)
    install_error_handlers(app)
    app.include_router(quiz_router)

    @app.get("/", tags=["infra"])
    def root() -> dict[str, str]:
        return {"message": "Quiz service is running"}

    @app.get("/healthz", tags=["infra"])
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.on_event("startup")
    async def _init() -> None:
        """Initialize service dependencies at application startup."""
        await init_db(engine)

    @app.on_event("shutdown")
    async def _close() -> None:
        await engine.dispose()

    return app
