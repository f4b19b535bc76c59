import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import sentry_sdk
from slowapi.errors import RateLimitExceeded

from compass.config import get_settings
from compass.exceptions import EngineContractError
from compass.rate_limiter import limiter
from compass.api import dashboard, insights, projects, commitments, decisions, reflections

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize Sentry if DSN is provided
if settings.sentry_dsn:
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1,
    )


app = FastAPI(
    title="Compass API",
    description="Prioritization and analytics engine for a leadership journal",
    version="1.0.0",
    # Disable docs in production for security
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url="/redoc" if settings.environment == "development" else None,
    openapi_url="/openapi.json" if settings.environment == "development" else None,
)

# Add rate limiter to app state
app.state.limiter = limiter


# Custom rate limit exceeded handler
@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={
            "detail": "Rate limit exceeded. Please slow down.",
            "retry_after": exc.detail,
        },
    )


@app.exception_handler(EngineContractError)
async def engine_contract_handler(request: Request, exc: EngineContractError):
    logger.warning(f"Contract error on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=422, content=exc.to_dict())


# CORS middleware - configured based on environment
# In development: allows localhost origins
# In production: requires CORS_ALLOWED_ORIGINS env var
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Accept"],
)

# Include routers
app.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
app.include_router(insights.router, prefix="/insights", tags=["Insights"])
app.include_router(projects.router, prefix="/projects", tags=["Projects"])
app.include_router(commitments.router, prefix="/commitments", tags=["Commitments"])
app.include_router(decisions.router, prefix="/decisions", tags=["Decisions"])
app.include_router(reflections.router, prefix="/reflections", tags=["Reflections"])


@app.get("/health")
@limiter.exempt  # Health checks should not be rate limited
async def health_check(request: Request):
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}
