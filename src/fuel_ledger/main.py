import logging
from contextlib import asynccontextmanager
from http import HTTPStatus

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from src.fuel_ledger.cache.redis import redis_manager
from src.fuel_ledger.config import get_settings
from src.fuel_ledger.database.database import DatabaseManager
from src.fuel_ledger.health_check.routes import health_router
from src.fuel_ledger.logging_config import setup_logging
from src.fuel_ledger.refuelings.routes import refuelings_router
from src.fuel_ledger.statistics.routes import statistics_router
from src.fuel_ledger.vehicles.routes import vehicles_router

setup_logging()
logger = logging.getLogger(__name__)
settings = get_settings()
PROJECT_NAME = settings.PROJECT_NAME
FastAPI_API_KEY_HEADER = settings.FASTAPI_API_KEY_HEADER
ALL_CORS_ORIGINS = settings.all_cors_origins


# Custom OpenAPI schema to include API key security
def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=PROJECT_NAME,
        version="0.1.0",
        description="Fleet refueling ledger with derived fuel consumption",
        routes=app.routes,
    )

    if "components" not in openapi_schema:
        openapi_schema["components"] = {}

    openapi_schema["components"]["securitySchemes"] = {
        "APIKeyHeader": {
            "type": "apiKey",
            "in": "header",
            "name": FastAPI_API_KEY_HEADER,
        }
    }

    for path in openapi_schema["paths"].values():
        for method in path.values():
            method.setdefault("security", []).append({"APIKeyHeader": []})

    app.openapi_schema = openapi_schema
    return app.openapi_schema


@asynccontextmanager
async def lifespan(app: FastAPI):  # type: ignore
    try:
        await DatabaseManager.connect()
        await DatabaseManager.create_tables()
        try:
            await redis_manager.init_redis()
        except Exception as e:
            logger.warning(f"Redis unavailable, summaries will not be cached: {e}")

        logger.info("Startup complete")
        yield

        logger.info("Shutting down...")
        await redis_manager.close_redis()
    except Exception as e:
        logger.error(f"Startup failed: {str(e)}")
        raise
    finally:
        await DatabaseManager.disconnect()
        logger.info("Shutdown complete")


app = FastAPI(title=PROJECT_NAME, version="0.1.0", lifespan=lifespan)
app.openapi = custom_openapi  # type: ignore[method-assign]


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=HTTPStatus.SERVICE_UNAVAILABLE,
        content={
            "detail": "Database connection error. Please try again later.",
            "error": str(exc),
        },
    )


@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError):
    logger.warning(f"Invalid input on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=HTTPStatus.BAD_REQUEST,
        content={
            "detail": "Invalid input.",
            "errors": exc.errors(include_url=False, include_context=False),
        },
    )


# Set all CORS enabled origins
if ALL_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALL_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# API Routes
api_router = APIRouter(prefix="/api")
api_router.include_router(vehicles_router)
api_router.include_router(statistics_router)
api_router.include_router(refuelings_router)
app.include_router(api_router)
app.include_router(health_router)
