"""Virtual Try-On API backend.

FastAPI application that accepts a person photo and a garment photo and
returns a composited JPEG with the garment drawn over the person:
- Garment scaled to 60% of the person's width and centred
- Translucent white patch masking the original clothing
- Result returned inline as a base64 data URL

Enhanced with:
- Structured logging
- Error handling
- Request timing
- CORS support
- Environment configuration
"""

import logging
import time
from typing import Optional

import anyio.to_thread
from fastapi import FastAPI, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile as StarletteUploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from config import Settings
from errors import ProcessingError, ValidationError
from models.compositor import VirtualTryOnProcessor
from utils import postprocess, preprocess


TRYON_PATH = "/api/tryon/generate"
HEALTH_PATH = "/health"
MAX_FILES = 2

AVAILABLE_ENDPOINTS = {
    "health": HEALTH_PATH,
    "tryon": TRYON_PATH,
}

logger = logging.getLogger(__name__)


# ============================================================================
# LOGGING CONFIGURATION
# ============================================================================

def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


# ============================================================================
# MIDDLEWARE
# ============================================================================

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all requests with timing information."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        logger.info(f"Request: {request.method} {request.url.path}")

        response = await call_next(request)

        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)

        logger.info(f"Response: {request.method} {request.url.path} - {response.status_code} - {process_time:.3f}s")

        return response


# ============================================================================
# ERROR HANDLERS
# ============================================================================

def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Map service errors onto the JSON error envelopes clients expect."""

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.warning(f"Validation error on {request.url.path}: {exc.message}")
        content = {"success": False, "error": exc.message}
        if exc.required:
            content["required"] = exc.required
        return JSONResponse(status_code=400, content=content)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": " -> ".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        logger.warning(f"Malformed request on {request.url.path}: {errors}")
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": "Malformed request",
                "details": errors,
                "required": preprocess.REQUIRED_FIELDS,
            },
        )

    @app.exception_handler(ProcessingError)
    async def processing_error_handler(request: Request, exc: ProcessingError):
        logger.error(f"Error in {request.url.path}: {exc.message}", exc_info=exc.cause)
        content = {"success": False, "error": "Failed to process virtual try-on"}
        if settings.expose_details:
            content["details"] = exc.message
        return JSONResponse(status_code=500, content=content)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            logger.warning(f"No route for {request.method} {request.url.path}")
            return JSONResponse(
                status_code=404,
                content={
                    "error": "Endpoint not found",
                    "availableEndpoints": AVAILABLE_ENDPOINTS,
                },
            )
        logger.error(f"HTTP {exc.status_code} on {request.url.path}: {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Server error on {request.url.path}: {str(exc)}")
        content = {"success": False, "error": "Internal server error"}
        if settings.expose_details:
            content["message"] = str(exc)
        return JSONResponse(status_code=500, content=content)


# ============================================================================
# APPLICATION FACTORY
# ============================================================================

def create_app(
    settings: Optional[Settings] = None,
    processor: Optional[VirtualTryOnProcessor] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Runtime settings; read from the environment when omitted
        processor: Compositor used by the try-on endpoint

    Returns:
        Configured FastAPI app
    """
    settings = settings or Settings.from_env()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Overlay a garment photo on a person photo",
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.processor = processor or VirtualTryOnProcessor()
    app.state.started_at = time.monotonic()

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-API-Token"],
    )

    register_exception_handlers(app, settings)

    @app.on_event("startup")
    async def announce_startup():
        logger.info("========================================")
        logger.info(f"{settings.app_name} v{settings.app_version} started")
        logger.info(f"Port: {settings.port}")
        logger.info(f"Health: http://localhost:{settings.port}{HEALTH_PATH}")
        logger.info(f"API: http://localhost:{settings.port}{TRYON_PATH}")
        logger.info("========================================")

    @app.on_event("shutdown")
    async def announce_shutdown():
        logger.info("Shutting down gracefully... server closed")

    # ========================================================================
    # API ENDPOINTS
    # ========================================================================

    @app.get("/")
    def root():
        """Service descriptor.

        Returns name, version, status and the list of endpoints.
        """
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "status": "running",
            "endpoints": AVAILABLE_ENDPOINTS,
            "documentation": settings.docs_url,
        }

    @app.get(HEALTH_PATH)
    def health(request: Request):
        """Liveness check with uptime and a memory snapshot."""
        return {
            "status": "OK",
            "service": settings.app_name,
            "timestamp": postprocess.utc_timestamp(),
            "uptime": round(time.monotonic() - request.app.state.started_at, 3),
            "memory": postprocess.memory_snapshot(),
        }

    @app.post(TRYON_PATH)
    async def generate_tryon(
        request: Request,
        person: Optional[UploadFile] = File(None),
        dress: Optional[UploadFile] = File(None),
    ):
        """Generate a virtual try-on image.

        Args:
            person: Photo of the person (JPEG, PNG or WebP)
            dress: Photo of the garment (JPEG, PNG or WebP)

        Returns:
            JSONResponse with:
                - success: True
                - result: Composite as a ``data:image/jpeg;base64`` URL
                - metadata: processingTime, resultSize and timestamp

        Raises:
            ValidationError: If a field is missing or an upload is not allowed
            ProcessingError: If the images cannot be composited
        """
        start_time = time.time()
        logger.info("Processing virtual try-on request...")

        if person is None or dress is None:
            raise ValidationError(
                "Both person and dress images are required",
                required=preprocess.REQUIRED_FIELDS,
            )

        form = await request.form()
        file_count = sum(1 for _, value in form.multi_items() if isinstance(value, StarletteUploadFile))
        if file_count > MAX_FILES:
            raise ValidationError(f"Too many files: expected at most {MAX_FILES}, got {file_count}")

        person_bytes = await preprocess.read_upload("person", person, settings.max_upload_bytes)
        dress_bytes = await preprocess.read_upload("dress", dress, settings.max_upload_bytes)

        logger.info(f"Processing images - Person: {len(person_bytes)} bytes, Dress: {len(dress_bytes)} bytes")

        processor = request.app.state.processor
        result = await anyio.to_thread.run_sync(processor.process_images, person_bytes, dress_bytes)

        processing_ms = int((time.time() - start_time) * 1000)
        logger.info(f"Virtual try-on completed in {processing_ms}ms")

        return JSONResponse({
            "success": True,
            "result": postprocess.to_data_url(result),
            "metadata": postprocess.build_metadata(processing_ms, len(result)),
            "message": "Virtual try-on generated successfully",
        })

    return app


app = create_app()


# ============================================================================
# APPLICATION STARTUP
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    current = app.state.settings
    uvicorn.run(
        "app:app",
        host=current.host,
        port=current.port,
        reload=current.debug,
        log_level="debug" if current.debug else "info",
    )
