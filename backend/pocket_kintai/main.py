import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from pocket_kintai.api import admin, attendance, auth, companies, leave, reports
from pocket_kintai.api.envelope import error
from pocket_kintai.core.config import settings
from pocket_kintai.core.errors import AppError
from pocket_kintai.core.logging_config import setup_logging
from pocket_kintai.core.middleware import RequestTimingMiddleware

setup_logging(level=settings.LOG_LEVEL, json_output=settings.LOG_JSON or settings.is_production)
logger = logging.getLogger(__name__)


def init_database():
    """Create any missing tables on startup."""
    from pocket_kintai.core.database import engine, Base
    import pocket_kintai.models  # noqa: F401  registers every table on Base.metadata

    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_database()
    yield


# Disable API docs in production
docs_url = "/docs" if not settings.is_production else None
redoc_url = "/redoc" if not settings.is_production else None

app = FastAPI(
    title=settings.APP_NAME,
    description="Pocket Kintai - attendance and leave management API",
    version="1.0.0",
    lifespan=lifespan,
    docs_url=docs_url,
    redoc_url=redoc_url,
)


# Every error leaves as the JSON error envelope, never plain text
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=error(exc.message))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        message = str(first.get("msg", message)).removeprefix("Value error, ")
    return JSONResponse(
        status_code=400,
        content=error(message, details=[
            {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
            for e in errors
        ]),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=error("Internal server error", details=str(exc)),
    )


allowed_origins = ["http://localhost:3000", "http://localhost:5173"]
if settings.FRONTEND_URL and settings.FRONTEND_URL not in allowed_origins:
    allowed_origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestTimingMiddleware)


@app.get("/health")
def health_check():
    return {"status": "healthy", "service": "pocket-kintai-api", "version": "1.0.0"}


@app.get("/")
def root():
    return {"message": f"{settings.APP_NAME} API", "version": "1.0.0", "docs": docs_url}


# Include routers
app.include_router(auth.router)
app.include_router(attendance.router)
app.include_router(leave.router)
app.include_router(reports.router)
app.include_router(admin.router)
app.include_router(companies.router)
