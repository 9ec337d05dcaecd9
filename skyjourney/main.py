from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from skyjourney.core.config import settings
from skyjourney.core.errors import DomainError, Unauthenticated, ValidationError
from skyjourney.core.logging import get_logger, setup_logging
from skyjourney.api.api import api_router
from skyjourney.db.store import MemStorage, Storage
from skyjourney import seed

logger = get_logger(__name__)

# browser frontends served from a local dev server
LOCAL_ORIGINS = ["http://localhost:5000", "http://localhost:5173"]


def _cors_origins() -> list[str]:
    origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
    return origins or LOCAL_ORIGINS


def _field_errors(errors) -> list[dict]:
    return [{"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]} for e in errors]


async def domain_error_handler(request: Request, exc: DomainError):
    body = {"detail": exc.message}
    headers = None
    if isinstance(exc, ValidationError) and exc.errors:
        body["errors"] = exc.errors
    if isinstance(exc, Unauthenticated):
        headers = {"WWW-Authenticate": "Bearer"}
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=body, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request data", "errors": _field_errors(exc.errors())},
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app(store: Storage | None = None) -> FastAPI:
    setup_logging()

    if store is None:
        store = MemStorage()
        if settings.SEED_DEMO_DATA:
            seed.run(store)

    app = FastAPI(title=settings.APP_NAME)
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
    )

    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(api_router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app

