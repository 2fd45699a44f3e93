"""Hauptanwendung für den Court-Desk (Platzbuchung & Zahlungsabgleich)"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
import logging

from courtdesk.config import settings
from courtdesk.logging_config import setup_logging
from courtdesk.database import init_db
from courtdesk.routers import clubs, reservations, payments, reports

# Logging konfigurieren (strukturiert mit Datei-Rotation)
setup_logging(debug=settings.debug, log_file=settings.log_file)
logger = logging.getLogger(__name__)

# Rate Limiter konfigurieren
limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup und Shutdown"""
    # ===== STARTUP =====
    logger.info(f"Starte {settings.app_name} v{settings.app_version}")

    if not settings.is_secret_key_from_env():
        logger.warning("SECRET_KEY ist nicht in .env gesetzt - Sessions gehen bei jedem Neustart verloren!")

    # Alembic zuerst, create_all legt danach nur noch fehlende Tabellen an
    if settings.run_migrations_on_startup:
        try:
            from courtdesk.utils.migration_checker import check_and_run_migrations
            check_and_run_migrations(auto_upgrade=True)
        except RuntimeError as e:
            logger.error(f"Migrations-Fehler beim Start: {e}")
            logger.error("App wird NICHT gestartet - bitte Migrationen manuell prüfen!")
            raise

    logger.info("Initialisiere Datenbank...")
    init_db()
    logger.info("Datenbank erfolgreich initialisiert!")

    yield

    # ===== SHUTDOWN =====
    logger.info(f"Beende {settings.app_name}")


# FastAPI App erstellen
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan
)

# Rate Limiter zur App hinzufügen
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Session Middleware hinzufügen
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.secret_key
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Ungültige Eingaben als 400 mit Error-Code"""
    logger.warning(f"Validierungsfehler {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={
            "detail": {
                "error": "validation",
                "message": "Ungültige Eingabe. Bitte überprüfen Sie Ihre Daten.",
                "errors": jsonable_encoder(exc.errors()),
            }
        }
    )


# Router registrieren
app.include_router(clubs.router)
app.include_router(reservations.router)
app.include_router(payments.router)
app.include_router(reports.router)


@app.get("/health")
async def health_check():
    """Health-Check-Endpunkt"""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "courtdesk.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
