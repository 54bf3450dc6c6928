import structlog
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .app_factory import create_service_app
from .config import settings
from .exceptions import PipelineTimeoutError, PlanGenerationError
from .logging_config import configure_logging
from .routers import coaching, plans
from .services.validation import issues_from_errors

configure_logging()
logger = structlog.get_logger(__name__)

app = create_service_app(title=settings.service_name, cors_allow_origins=settings.cors_origins)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = "Method not allowed" if exc.status_code == 405 else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=exc.headers)


def _without_body_prefix(errors):
    for err in errors:
        loc = tuple(err.get("loc", ()))
        yield {**err, "loc": loc[1:] if loc[:1] == ("body",) else loc}


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    issues = issues_from_errors(_without_body_prefix(exc.errors()))
    rendered = "; ".join(f"{issue.path}: {issue.message}" for issue in issues[:5])
    return JSONResponse(status_code=400, content={"error": f"Invalid request body: {rendered}"})


@app.exception_handler(PipelineTimeoutError)
async def pipeline_timeout_exception_handler(request: Request, exc: PipelineTimeoutError):
    return JSONResponse(status_code=504, content={"error": str(exc), "timeout": True})


@app.exception_handler(PlanGenerationError)
async def plan_generation_exception_handler(request: Request, exc: PlanGenerationError):
    logger.error("plan_generation_request_failed", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled_request_error", path=request.url.path)
    return JSONResponse(status_code=500, content={"error": str(exc) or "Internal server error"})


async def preflight():
    return JSONResponse(status_code=200, content={})


@app.get("/health")
async def health():
    return {"status": "ok"}


for router in (plans.router, coaching.router):
    app.include_router(router)
    for path in sorted({route.path for route in router.routes}):
        app.add_api_route(path, preflight, methods=["OPTIONS"], include_in_schema=False)
