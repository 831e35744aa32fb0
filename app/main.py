"""
Campus Placement Portal - Main Application

FastAPI backend with:
- MongoDB record store (in-memory backend for local runs and tests)
- Eligibility checks and recommendation scores for students
- Internship posting and recruiter submission workflow
- Mentor-led application pipeline with email notifications
- JWT authentication

Run: uvicorn app.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import api_router
from app.core.config import get_settings
from app.core.errors import PlacementError, StoreUnavailable
from app.db.mongodb import init_mongo_indexes, test_mongo_connection

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Campus Placement Portal",
    description="""
    Internship placement portal for a college campus.

    ## Features
    - **Authentication**: JWT-based auth for students, mentors, admins and recruiters
    - **Internships**: Admins post directly, recruiters submit for approval
    - **Eligibility**: Department / CGPA / semester checks and 0-100 match scores
    - **Applications**: Mentor approval, interviews, offers
    - **Audit log**: Bounded trail of admin actions
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


# ============================================================
# ERROR HANDLERS
# ============================================================

@app.exception_handler(PlacementError)
async def placement_error_handler(request: Request, exc: PlacementError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail, "error": exc.kind})


@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
    logger.error("Record store unavailable on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": "Service temporarily unavailable", "error": "store_unavailable"}
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error", "error": "internal"})


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize MongoDB indexes on startup."""
    if settings.store_backend != "mongo":
        logger.info("Using %s record store", settings.store_backend)
        return
    try:
        init_mongo_indexes()
    except Exception as e:
        logger.warning("MongoDB index initialization failed: %s", e)


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "Campus Placement Portal"}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    if settings.store_backend == "mongo":
        store = "connected" if test_mongo_connection() else "disconnected"
    else:
        store = settings.store_backend
    return {"status": "healthy", "store": store}
