"""
PBU Records FastAPI Application Entry Point
Main application setup with middleware and routers
"""

import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from app.core.config import settings
from app.core.database import init_db, close_db
from app.core.exceptions import InvalidInput, RecordsError
from app.core.logging import LogEvents, TracingContext, get_logger, setup_structured_logging
from app.api.v1.router import api_router

logger = get_logger("API")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    setup_structured_logging(level=settings.LOG_LEVEL, json_output=settings.LOG_JSON)
    await init_db()
    yield
    # Shutdown
    await close_db()


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Draft and snapshot storage for brand/role spreadsheet records",
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
    openapi_url="/api/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan,
)

# CORS Middleware
cors_origins = settings.cors_origin_list
# Add localhost origins for development
dev_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
cors_origins.extend([o for o in dev_origins if o not in cors_origins])
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# GZip Middleware
app.add_middleware(GZipMiddleware, minimum_size=1000)


@app.middleware("http")
async def trace_requests(request: Request, call_next):
    """One trace_id per request, echoed back as X-Trace-Id"""
    TracingContext.clear()
    trace_id = request.headers.get("X-Trace-Id")
    if trace_id:
        TracingContext.set_trace_id(trace_id)
    else:
        trace_id = TracingContext.new_trace()

    start_time = time.time()
    logger.debug(LogEvents.REQUEST_START, method=request.method, path=request.url.path)

    response = await call_next(request)

    logger.info(
        LogEvents.REQUEST_COMPLETE,
        method=request.method,
        path=request.url.path,
        status=response.status_code,
        elapsed_ms=int((time.time() - start_time) * 1000),
    )
    response.headers["X-Trace-Id"] = trace_id
    return response


@app.exception_handler(RecordsError)
async def records_error_handler(request: Request, exc: RecordsError):
    """Typed service errors -> {"error", "code", "category"}"""
    logger.warning(
        LogEvents.REQUEST_FAILED,
        path=request.url.path,
        status=exc.http_status,
        code=exc.code.value,
        error=exc.message,
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are reported like any other InvalidInput"""
    message = "Invalid request"
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = first.get("msg", "invalid value")
        message = f"{message}: {location}: {detail}" if location else f"{message}: {detail}"

    return await records_error_handler(request, InvalidInput(message))


# Include API routers
app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Health check endpoint"""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "ok",
        "environment": settings.ENVIRONMENT,
    }


@app.get("/health")
async def health_check():
    """Health check for monitoring"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
