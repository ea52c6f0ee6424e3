import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from trombinoscope.config import settings
from trombinoscope.database import init_db
from trombinoscope.middleware.rate_limit import RateLimitMiddleware
from trombinoscope.middleware.request_logging import RequestLoggingMiddleware
from trombinoscope.routes.auth import router as auth_router
from trombinoscope.routes.employees import router as employees_router
from trombinoscope.routes.events import router as events_router
from trombinoscope.utils.exceptions import AppException, ErrorKind

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Cycle de vie de l'application"""
    # Démarrage: tables, index et compte administrateur initial
    init_db()
    logger.info("Base de données initialisée")
    yield
    logger.info("Arrêt de l'application")


app = FastAPI(
    title=settings.app_name,
    description="API du trombinoscope et de l'agenda d'équipe",
    version=API_VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan
)

# Le dernier middleware ajouté est le plus externe
app.add_middleware(
    RateLimitMiddleware,
    max_requests=settings.rate_limit_max_requests,
    window_seconds=settings.rate_limit_window_seconds,
    enabled=settings.rate_limit_enabled,
)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(status_code: int, message: str, code: str, headers: dict = None, **extra) -> JSONResponse:
    content = {"success": False, "error": message, "code": code}
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    headers = {"WWW-Authenticate": "Bearer"} if exc.kind == ErrorKind.AUTH else None
    return error_response(exc.status_code, exc.message, exc.code, headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg"),
        }
        for err in exc.errors()
    ]
    return error_response(400, "Données invalides", "VALIDATION_ERROR", details=details)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return error_response(404, "Route non trouvée", "ROUTE_NOT_FOUND")
    return error_response(exc.status_code, str(exc.detail), "HTTP_ERROR", headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Erreur non gérée sur %s %s", request.method, request.url.path)
    extra = {"details": str(exc)} if settings.debug else {}
    return error_response(500, "Erreur interne du serveur", "INTERNAL_ERROR", **extra)


@app.get("/api/health")
async def health_check():
    """État de l'application"""
    return {
        "success": True,
        "status": "OK",
        "app_name": settings.app_name,
        "version": API_VERSION,
    }


app.include_router(auth_router)
app.include_router(employees_router)
app.include_router(events_router)


@app.get("/")
async def root():
    return {
        "message": "API Trombinoscope",
        "docs": "/api/docs",
        "openapi": "/api/openapi.json"
    }


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    uvicorn.run(
        "trombinoscope.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
