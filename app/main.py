from contextlib import asynccontextmanager

import logfire
import sentry_sdk
from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.config import settings
from app.database.database import Base, engine, get_db
from app.routes import (
    parcel_routes,
    payment_routes,
    rider_routes,
    tracking_routes,
    user_routes,
)
from app.utils import limiter
from app.utils.logger_config import configure_production_logging, setup_logger

# Register the tables on Base.metadata
from app.models import models  # noqa: F401


if settings.ENVIRONMENT == "production":
    configure_production_logging()

logger = setup_logger()


@asynccontextmanager
async def lifespan(application: FastAPI):
    logger.info("Initializing application...")
    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database connection successful")

    yield

    logger.info("Cleaning up resources...")
    await engine.dispose()
    logger.info("Cleanup complete")


if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        send_default_pii=False,
        traces_sample_rate=1.0,
    )


app = FastAPI(
    title=settings.APP_NAME,
    lifespan=lifespan,
    debug=settings.DEBUG,
    summary="Parcel courier marketplace: riders, parcel tracking and checkout.",
)

app.state.limiter = limiter.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {str(exc)}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Database error"},
    )


logfire.configure(
    service_name="zap-shift",
    token=settings.LOGFIRE_TOKEN,
    send_to_logfire="if-token-present",
    console=False,
)
if settings.LOGFIRE_TOKEN:
    logfire.instrument_fastapi(app=app)
    logfire.instrument_sqlalchemy(engine=engine.sync_engine)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.get("/")
def read_root():
    return {"message": "Zap Shift is Shifting..."}


@app.get("/api/health", tags=["Health Status"])
def api_health_check() -> dict:
    """Check the status of the API"""
    return {"status": "OK", "message": "API up and running"}


@app.get("/api/db", tags=["Health Status"])
async def check_db_health(db: AsyncSession = Depends(get_db)):
    """Check database connectivity"""
    try:
        await db.execute(text("SELECT 1"))
        return {"status": "healthy", "database": "connected"}
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {str(e)}")
        return {"status": "unhealthy", "database": "disconnected", "error": str(e)}


app.include_router(user_routes.router)
app.include_router(rider_routes.router)
app.include_router(parcel_routes.router)
app.include_router(payment_routes.router)
app.include_router(tracking_routes.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.PORT)
