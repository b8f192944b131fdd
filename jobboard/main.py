import logging
import traceback
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text

from jobboard.config import settings
from jobboard.core.exceptions import JobBoardError
from jobboard.core.rate_limiter import AUTH_PATHS, rate_limiter
from jobboard.database import init_db, engine
from jobboard.logging_config import setup_logging
from jobboard.routers import auth, jobs, users
from jobboard.services.cv_storage import CV_URL_PREFIX

setup_logging()
logger = logging.getLogger(__name__)

SECRET_KEY_PLACEHOLDER = "replace-with-a-long-random-secret-key"

app = FastAPI(
    title="Job Board API",
    description="Job postings, applications with CV upload, and role-based administration.",
    version="1.0.0",
)

cors_origins = [o.strip() for o in settings.cors_allow_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(jobs.router)
app.include_router(users.router)

Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
app.mount(CV_URL_PREFIX, StaticFiles(directory=settings.upload_dir), name="cvs")


@app.exception_handler(JobBoardError)
async def job_board_error_handler(request, exc: JobBoardError):
    if exc.status_code >= 500:
        logger.error("Server error on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": type(exc).__name__, "category": exc.category()},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request, exc):
    logger.exception("Unhandled server error on %s %s: %s", request.method, request.url.path, exc)
    content = {"detail": "Internal server error", "error": "ServerError", "category": "ServerError"}
    if not settings.is_production:
        content["message"] = str(exc)
        content["trace"] = traceback.format_exception(type(exc), exc, exc.__traceback__)
    return JSONResponse(status_code=500, content=content)


@app.middleware("http")
async def apply_rate_limits(request, call_next):
    if request.method == "OPTIONS" or request.url.path not in AUTH_PATHS:
        return await call_next(request)

    limit = settings.rate_limit_auth_per_min
    if limit > 0:
        client_ip = request.client.host if request.client else "unknown"
        allowed, retry_after = rate_limiter.allow(f"{client_ip}:{request.url.path}", limit=limit, window_seconds=60)
        if not allowed:
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
        return {"status": "ready"}
    except Exception:
        logger.exception("Readiness check failed")
        return JSONResponse(status_code=503, content={"status": "not_ready"})


@app.on_event("startup")
def on_startup():
    logger.info("Starting Job Board API")
    if settings.is_production:
        if settings.secret_key == SECRET_KEY_PLACEHOLDER:
            raise RuntimeError("SECRET_KEY placeholder is not allowed in production")
        if "username:password@" in settings.database_url:
            raise RuntimeError("DATABASE_URL placeholder credentials are not allowed in production")
    else:
        if settings.secret_key == SECRET_KEY_PLACEHOLDER:
            logger.warning("SECRET_KEY is using placeholder default. Set SECRET_KEY in .env for secure deployments.")
        if "username:password@" in settings.database_url:
            logger.warning("DATABASE_URL appears to use placeholder credentials. Set DATABASE_URL in .env.")
    init_db()


@app.get("/")
def root():
    return {"message": "Job Board API is running..."}
