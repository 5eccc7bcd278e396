import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.config import settings
from app.core.rate_limiter import limit_for, rate_limiter
from app.core.security import uses_placeholder_secret
from app.database import init_db, engine
from app.logging_config import setup_logging
from app.routers import (
    admin,
    ai,
    applications,
    auth,
    billing,
    bookmarks,
    call_requests,
    dashboard,
    jobs,
    notifications,
    profile,
    resumes,
)

setup_logging()
logger = logging.getLogger(__name__)

RATE_WINDOW_SECONDS = 60
PLACEHOLDER_DB_CREDENTIALS = "username:password@"

ROUTERS = (
    auth.router,
    profile.router,
    jobs.router,
    applications.router,
    applications.my_router,
    call_requests.router,
    bookmarks.router,
    notifications.router,
    resumes.router,
    ai.router,
    admin.router,
    dashboard.router,
    billing.router,
)

app = FastAPI(
    title="CampusConnect API",
    description="Campus job marketplace: profiles, jobs, applications, video calls, notifications and payments.",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_allow_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for router in ROUTERS:
    app.include_router(router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled server error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def _client_ip(request: Request) -> str:
    # First hop of X-Forwarded-For when running behind the load balancer.
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


@app.middleware("http")
async def apply_rate_limits(request: Request, call_next):
    if request.method == "OPTIONS":
        return await call_next(request)

    path = request.url.path
    limit = limit_for(request.method, path)
    if limit:
        allowed, retry_after = rate_limiter.allow(
            f"{_client_ip(request)}:{path}", limit=limit, window_seconds=RATE_WINDOW_SECONDS
        )
        if not allowed:
            logger.info("Rate limit hit path=%s limit=%d/min", path, limit)
            return JSONResponse(
                status_code=429,
                content={"detail": "Too many requests. Please retry shortly."},
                headers={"Retry-After": str(retry_after)},
            )
    return await call_next(request)


@app.get("/health/live")
def health_live():
    return {"status": "ok"}


@app.get("/health/ready")
def health_ready():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Readiness check failed")
        return JSONResponse(status_code=503, content={"status": "not_ready"})
    return {"status": "ready"}


def _config_problems() -> list[str]:
    problems = []
    if uses_placeholder_secret():
        problems.append("SECRET_KEY is the placeholder default")
    if PLACEHOLDER_DB_CREDENTIALS in settings.database_url:
        problems.append("DATABASE_URL uses placeholder credentials")
    return problems


@app.on_event("startup")
def on_startup():
    logger.info("Starting CampusConnect API env=%s", settings.app_env)
    problems = _config_problems()
    if problems and (settings.app_env or "").lower() in {"production", "prod"}:
        raise RuntimeError("Refusing to start in production: " + "; ".join(problems))
    for problem in problems:
        logger.warning("%s; set it in .env for real deployments.", problem)

    # Optional integrations degrade instead of failing.
    if not settings.resend_api_key:
        logger.warning("RESEND_API_KEY not set; transactional email is disabled.")
    if not (settings.hms_app_access_key and settings.hms_app_secret):
        logger.warning("100ms credentials not set; accepted calls will use mock rooms.")
    if not settings.stripe_secret_key:
        logger.warning("STRIPE_SECRET_KEY not set; checkout endpoints return 503.")
    init_db()


@app.get("/")
def root():
    return {"message": "CampusConnect API. See /docs for the endpoint reference."}
