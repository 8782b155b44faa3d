import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import health, progress, statistics, tests
from app.core.config import get_settings
from app.core.errors import EngineError, UpstreamGenerationError

settings = get_settings()
logger = logging.getLogger("testcraft.main")

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=settings.app_name,
    description="AI-generated multiple-choice tests with progress tracking and learning analytics",
    version="0.1.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.frontend_url,
        "http://localhost:5173",  # Vite dev server
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(EngineError)
async def engine_error_handler(request: Request, exc: EngineError):
    detail: object = exc.message
    if isinstance(exc, UpstreamGenerationError):
        logger.error("[main] %s %s: %s", request.method, request.url.path, exc.extra.get("cause"))
        # the raw generator error is only exposed while debugging
        if get_settings().debug:
            detail = {"message": exc.message, "cause": exc.extra.get("cause")}
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": detail, "error_code": exc.error_code},
    )


# Include routers
app.include_router(health.router)
app.include_router(tests.router)
app.include_router(progress.router)
app.include_router(statistics.router)


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "docs": "/docs",
        "health": "/health",
    }
