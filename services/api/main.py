"""
ArchiSheets - Backend API
FastAPI service keeping architecture projects (chapters, documents,
{{KEY}} placeholders) in sync with one Google Sheets spreadsheet per project.

Run server:
uvicorn main:app --host 0.0.0.0 --port 8000
"""

import contextvars
import logging
import os
import time
import uuid

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.errors import ArchiSheetsError, AuthenticationError
from dependencies import get_assistant, get_workspace
from routers import chapters, export, placeholders, projects, session, sync
from schemas import HealthCheck
from settings import get_settings

# ========== Request Context for Tracing ==========
request_id_var = contextvars.ContextVar('request_id', default=None)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# ============================================================================
# BACKEND CONFIGURATION
# ============================================================================
settings = get_settings()

STORAGE_BACKEND = settings.storage_backend.lower()
ALLOWED_ORIGINS = settings.get_origins_list()

logger.info(f"🔧 Storage Backend: {STORAGE_BACKEND.upper()}")

# ============================================================================
# FASTAPI APP
# ============================================================================

app = FastAPI(
    title="ArchiSheets API",
    description="Architecture project memories backed by Google Sheets",
    version="1.0",
    docs_url="/docs",
    redoc_url="/redoc"
)


# ========== Request Tracing Middleware ==========
@app.middleware("http")
async def request_tracing_middleware(request, call_next):
    """Add request_id and timing to all requests."""
    request_id = str(uuid.uuid4())[:8]
    request_id_var.set(request_id)
    started = time.time()

    response = await call_next(request)

    latency = time.time() - started
    logger.info(
        f"[{request_id}] {request.method} {request.url.path} -> {response.status_code} "
        f"({round(latency * 1000, 2)} ms)"
    )

    response.headers["X-Request-ID"] = request_id
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _workspace_for(request: Request):
    # honour dependency overrides so tests see the same workspace as the routers
    provider = request.app.dependency_overrides.get(get_workspace, get_workspace)
    return provider()


@app.exception_handler(ArchiSheetsError)
async def archisheets_error_handler(request: Request, exc: ArchiSheetsError):
    if isinstance(exc, AuthenticationError):
        # an expired/invalid credential must not be reused
        _workspace_for(request).sign_out()
    if exc.status_code >= 500:
        logger.error(f"[{request_id_var.get()}] {exc.code}: {exc.message}")
    else:
        logger.info(f"[{request_id_var.get()}] {exc.code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "code": "INTERNAL_ERROR"}
    )

# ============================================================================
# ENDPOINTS
# ============================================================================
@app.get("/health", response_model=HealthCheck)
async def health_check():
    """Health check endpoint (no remote calls)."""
    return HealthCheck(backend=STORAGE_BACKEND, assistant=get_assistant().enabled)


@app.get("/")
async def root():
    return {
        "service": "ArchiSheets API",
        "version": "1.0",
        "docs": "/docs",
        "backend": STORAGE_BACKEND,
    }


app.include_router(session.router)
app.include_router(projects.router)
app.include_router(chapters.router)
app.include_router(placeholders.router)
app.include_router(sync.router)
app.include_router(export.router)


@app.on_event("startup")
async def startup_event():
    logger.info("ArchiSheets API starting up...")
    logger.info(f"Storage Backend: {STORAGE_BACKEND.upper()}")
    if STORAGE_BACKEND == "sheets":
        logger.info(f"Master sheet: {settings.master_sheet_id or '(not set)'} / tab {settings.master_tab_name}")
    logger.info(f"Allowed origins: {ALLOWED_ORIGINS}")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("ArchiSheets API shutting down...")


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")
