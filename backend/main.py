import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from screening.core.config import settings
from screening.core.exceptions import UnrecoverableInputError
from screening.core.logging_config import configure_logging
from screening.api.routes import assessments

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    configure_logging()
    logger.info("Starting %s...", settings.PROJECT_NAME)
    yield
    # Shutdown
    logger.info("Shutdown complete.")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Surrogacy candidate screening: narrative extraction and clinic-type risk assessment",
    version="0.1.0",
    lifespan=lifespan
)

# Configure CORS
allowed_origins = [
    settings.FRONTEND_URL,
    "http://localhost:3000",
]
# Add any additional origins from ALLOWED_ORIGINS env var
if settings.ALLOWED_ORIGINS:
    allowed_origins.extend([o.strip() for o in settings.ALLOWED_ORIGINS.split(",") if o.strip()])

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(UnrecoverableInputError)
async def unrecoverable_input_handler(request: Request, exc: UnrecoverableInputError):
    logger.warning("Rejected input on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


# Include routers
app.include_router(
    assessments.router,
    prefix=f"{settings.API_V1_STR}/assessments",
    tags=["Assessments"]
)


@app.get("/")
async def root():
    return {
        "name": settings.PROJECT_NAME,
        "version": "0.1.0",
        "status": "running",
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
