from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.staticfiles import StaticFiles
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
import logging

from .config import get_settings, APP_VERSION
from .db import get_db, close_db
from .activation import activate
from .exceptions import NotFoundError, ValidationError
from .migrations.runner import MigrationRunner
from .migrations.units import default_registry
from .repositories import SettingsStore
from .routers import dogs, people, litters, puppies, pedigree, events, health_events, reports, public, admin

# Configurar logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

settings = get_settings()

# Configurar rate limiting
limiter = Limiter(key_func=get_remote_address)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Equivalente al hook de activación: un fallo de migración aborta el arranque
    if settings.auto_migrate:
        db = await get_db()
        store = SettingsStore(db)
        runner = MigrationRunner(store, default_registry(), db)
        applied = await activate(store, runner, settings.migration_lock_ttl)
        if applied:
            logger.info("Migraciones aplicadas al arrancar: %s", applied)
    yield
    close_db()

app = FastAPI(title=settings.app_name, version=APP_VERSION, lifespan=lifespan)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.mount("/media", StaticFiles(directory=settings.media_dir), name="media")

@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})

@app.exception_handler(ValidationError)
async def validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": exc.message, "errors": exc.errors})

# Configuración de CORS según entorno
if settings.env == "dev":
    cors_origins = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
    cors_regex = r"https?://(localhost|127\.0\.0\.1)(:\d+)?"
    cors_headers = ["Authorization", "Content-Type", "Accept", "Origin", "X-Requested-With"]
else:
    # Producción: solo el frontend configurado
    frontend_url = settings.frontend_base_url
    cors_origins = [frontend_url] if frontend_url else []
    cors_regex = None
    cors_headers = ["Authorization", "Content-Type", "Accept"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_origin_regex=cors_regex,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=cors_headers,
    expose_headers=["Content-Type"],
)

@app.get("/health")
async def health():
    return {"status": "ok", "env": settings.env, "version": APP_VERSION}

# Routers
app.include_router(dogs.router, prefix="/dogs", tags=["dogs"])
app.include_router(people.router, prefix="/people", tags=["people"])
app.include_router(litters.router, prefix="/litters", tags=["litters"])
app.include_router(puppies.router, prefix="/puppies", tags=["puppies"])
app.include_router(pedigree.router, prefix="/pedigree", tags=["pedigree"])
app.include_router(events.router, prefix="/events", tags=["events"])
app.include_router(health_events.router, prefix="/health-events", tags=["health"])
app.include_router(reports.router, prefix="/reports", tags=["reports"])
app.include_router(public.router, prefix="/public", tags=["public"])
app.include_router(admin.router, prefix="/admin", tags=["admin"])
