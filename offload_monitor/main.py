import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from offload_monitor import __version__
from offload_monitor.api import dashboard, status as status_api, system
from offload_monitor.api.dashboard import STATIC_DIR
from offload_monitor.config import settings
from offload_monitor.middleware import MetricsMiddleware
from offload_monitor.models.common import ErrorDetail, ErrorResponse
from offload_monitor.services import environment_probe, hardware_probe

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Offload Monitor {__version__} starting on port {settings.PORT} ({settings.APP_ENV})")

    gpu = hardware_probe.probe()
    offload = environment_probe.probe()
    logger.info(f"Docker Offload: {'ENABLED' if offload.enabled else 'DISABLED'}")
    logger.info(f"GPU Support: {'DETECTED' if gpu.detected else 'NOT DETECTED'} ({gpu.method.value})")
    logger.info(f"GPU: {gpu.name}")
    yield
    logger.info("Application shutdown")


app = FastAPI(
    title="Offload Monitor",
    description="Host, GPU and cloud offload status dashboard",
    version=__version__,
    lifespan=lifespan
)

# ============================================================================
# Middleware
# ============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(MetricsMiddleware)

# ============================================================================
# Exception Handlers
# ============================================================================

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    code = "NOT_FOUND" if exc.status_code == status.HTTP_404_NOT_FOUND else "HTTP_ERROR"
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=str(exc.detail))).model_dump(mode='json'),
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error=ErrorDetail(code="INTERNAL_ERROR", message="Internal server error")).model_dump(mode='json')
    )

# ============================================================================
# Routers
# ============================================================================

app.include_router(dashboard.router, tags=["Dashboard"])
app.include_router(status_api.router, tags=["Status"])
app.include_router(system.router, tags=["System"])

app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")
