import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mdfury.api.v1 import router as v1_router
from mdfury.api.v1.middlewares.request_logging_middleware import (SENSITIVE_QUERY_PARAMS, log_request_middleware,
                                                                 redact)
from mdfury.core.services.error_logger_service import ErrorLoggerService
from mdfury.core.services.redis_service import RedisService
from mdfury.database.database_factory import create_tables
from mdfury.schemas.base import BaseResponse, ErrorResponse

project_name = "mdFury"

# 4xx responses that point at a client/server mismatch rather than bad input
PERSISTED_CLIENT_ERRORS = {405, 415, 429}

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting up {project_name} server...")
    try:
        await create_tables()
    except Exception as e:
        logger.error(f"Error during startup: {str(e)}")
        raise
    yield
    await (await RedisService.get_instance()).close()
    logger.info(f"{project_name} server stopped")


app = FastAPI(title=f"{project_name} API",
              description="Markdown bins with private, password-protected and invite-only sharing",
              version="1.0.0",
              docs_url="/docs",
              redoc_url="/redoc",
              lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,  # not allowed together with a wildcard origin
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(log_request_middleware)
app.include_router(v1_router)


def _persist_error(request: Request, error: Exception, error_type: Optional[str] = None,
                   context_data: Optional[dict] = None) -> None:
    asyncio.create_task(ErrorLoggerService.log_request_error(request, error, error_type, context_data))


def _error_response(request: Request, status_code: int, message: str, error: ErrorResponse,
                    headers: Optional[dict] = None) -> JSONResponse:
    body = BaseResponse(success=False,
                        message=message,
                        request_id=getattr(request.state, "request_id", str(uuid.uuid4())),
                        error=error)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"), headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    logger.warning(f"Validation error on {request.method} {request.url.path}: {errors}")
    _persist_error(request, exc, "VALIDATION_ERROR", {
        "validation_errors": [
            {"location": list(err["loc"]), "message": err["msg"], "type": err.get("type", "unknown")}
            for err in errors
        ]
    })
    return _error_response(request, 422, "Validation Error", ErrorResponse(
        message="Invalid request data",
        details=[{"loc": list(err["loc"]), "msg": err["msg"]} for err in errors]
    ))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    status_code = exc.status_code

    if status_code >= 500:
        logger.error(f"Server error: {exc.detail}")
        _persist_error(request, exc, f"HTTP_{status_code}")
    elif status_code >= 400:
        logger.warning(f"Client error {status_code}: {exc.detail}")
        if status_code in PERSISTED_CLIENT_ERRORS:
            _persist_error(request, exc, f"HTTP_{status_code}")

    # Routes raise dict details already shaped like ErrorResponse
    if isinstance(exc.detail, dict):
        error = ErrorResponse(**exc.detail)
    else:
        error = ErrorResponse(message=str(exc.detail), details=[{"msg": str(exc.detail)}])

    return _error_response(request, status_code, "Request failed", error,
                           headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    error_id = f"err_{uuid.uuid4().hex[:10]}"
    logger.error(f"Unhandled exception ({error_id}): {str(exc)}", exc_info=True)
    _persist_error(request, exc, context_data={
        "error_id": error_id,
        "query_params": redact(dict(request.query_params), SENSITIVE_QUERY_PARAMS)
    })
    return _error_response(request, 500, "Internal Server Error", ErrorResponse(
        message=f"An unexpected error occurred (Error ID: {error_id})"))


@app.get("/")
async def root():
    return BaseResponse(message=f"Welcome to {project_name} API")


@app.get("/health")
async def health_check():
    return BaseResponse(data={"status": "healthy", "version": app.version})


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("mdfury.main:app",
                host="0.0.0.0",
                port=8000,
                reload=True,
                log_level="info")
