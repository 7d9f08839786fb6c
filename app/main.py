from fastapi import FastAPI, Request
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware
from sqlalchemy import text
from app.api import auth, catalogos, cotizaciones, usuarios
from app.core.config import settings
from app.core.redis import init_redis, close_redis, get_redis_or_none
from app.core.metrics import request_count, request_duration, db_connected, redis_connected, get_metrics_text
from app.db.session import engine
import time
import logging

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        try:
            response = await call_next(request)
        except Exception:
            self._observe(request, 500, start_time)
            raise
        self._observe(request, response.status_code, start_time)
        return response

    @staticmethod
    def _observe(request: Request, status_code: int, start_time: float):
        # Route templates keep label cardinality bounded.
        route = request.scope.get("route")
        endpoint = getattr(route, "path", request.url.path)
        duration = time.time() - start_time
        request_count.labels(method=request.method, endpoint=endpoint, status=status_code).inc()
        request_duration.labels(method=request.method, endpoint=endpoint).observe(duration)


async def _database_ready() -> bool:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting...")

    logger.info("Initializing Redis connection...")
    try:
        await init_redis()
        redis_connected.set(1)
        logger.info("Redis connected")
    except Exception as e:
        logger.error(f"Redis connection failed, running without cache and rate limits: {e}")
        redis_connected.set(0)

    db_connected.set(1 if await _database_ready() else 0)

    yield

    logger.info("Application shutting down...")
    await close_redis()
    redis_connected.set(0)
    await engine.dispose()
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
)

app.add_middleware(MetricsMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix=settings.API_PREFIX)
app.include_router(usuarios.router, prefix=settings.API_PREFIX)
app.include_router(catalogos.router, prefix=settings.API_PREFIX)
app.include_router(cotizaciones.router, prefix=settings.API_PREFIX)


@app.get("/metrics", tags=["monitoring"])
async def metrics():
    return Response(
        content=get_metrics_text(),
        media_type="text/plain; version=0.0.4; charset=utf-8"
    )


@app.get("/health", tags=["monitoring"])
async def health_check():
    redis_healthy = get_redis_or_none() is not None

    return {
        "status": "healthy",
        "service": settings.API_TITLE,
        "version": settings.API_VERSION,
        "dependencies": {
            "redis": "connected" if redis_healthy else "disconnected",
            "database": "connected"
        }
    }


@app.get("/readiness", tags=["monitoring"])
async def readiness_check():
    database_ready = await _database_ready()
    db_connected.set(1 if database_ready else 0)

    if not database_ready:
        return JSONResponse(status_code=503, content={"ready": False, "reason": "Database not available"})

    return {
        "ready": True,
        "service": settings.API_TITLE,
        "redis": get_redis_or_none() is not None,
    }


@app.get("/", tags=["root"])
async def root():
    return {
        "message": settings.API_TITLE,
        "version": settings.API_VERSION,
        "docs": "/docs",
        "health": "/health",
        "metrics": "/metrics"
    }
