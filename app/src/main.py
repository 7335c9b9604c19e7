import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.middleware.httpsredirect import HTTPSRedirectMiddleware
from fastapi_problem.handler import add_exception_handler
from src.core.config import settings
from src.core.constants import GUEST_ID_HEADER
from src.core.database.session import engine
from src.core.database.utils import create_tables
from src.core.exceptions.handler import eh
from src.core.logging import get_logger, get_logging_config, setup_exception_logging, setup_logging
from src.core.middlewares import RequestThrottlerMiddleware, RequestUtilsMiddleware
from src.domain.routers import (
    admin_router,
    cart_router,
    catalog_router,
    favorite_router,
    health_router,
    order_router,
    profile_router,
    promotion_router,
)
from src.libs.kvstore import setup_kv_service, teardown_kv_service

if settings.ENVIRONMENT in ["staging", "production"]:
    setup_logging(config_override=get_logging_config())
    setup_exception_logging()


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: ARG001
    """
    Create the storefront tables and open the cart store on startup; close both on shutdown.
    """
    try:
        await create_tables(engine)
        await setup_kv_service()
    except Exception as exc:
        logger.error(
            "Storefront startup failed",
            exc_info=True,
            extra={"event_type": "app_startup_failed", "exception_type": type(exc).__name__},
        )
        raise

    logger.info(
        "Storefront API ready",
        extra={
            "event_type": "app_startup_complete",
            "environment": settings.ENVIRONMENT,
            "app_version": settings.APP_VERSION,
            "database_dialect": engine.dialect.name,
            "cart_store": settings.CART_STORE_PROVIDER,
        },
    )

    try:
        yield
    finally:
        try:
            await teardown_kv_service()
            await engine.dispose()
            logger.info("Storefront API stopped", extra={"event_type": "app_shutdown_complete"})
        except asyncio.CancelledError:
            logger.info("Storefront shutdown cancelled", extra={"event_type": "app_shutdown_cancelled"})
        except Exception as exc:
            logger.error(
                "Error while closing the cart store or database engine",
                exc_info=True,
                extra={"event_type": "app_shutdown_error", "exception_type": type(exc).__name__},
            )


app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    lifespan=lifespan,
    docs_url=settings.OPENAPI_DOCS_URL,
    openapi_url=settings.OPENAPI_JSON_SCHEMA_URL,
    redoc_url=None,
)

add_exception_handler(app, eh)


# Middlewares
if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin).strip("/") for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[GUEST_ID_HEADER],
    )


if settings.ENVIRONMENT in ["production"]:
    app.add_middleware(HTTPSRedirectMiddleware)


app.add_middleware(GZipMiddleware, compresslevel=5)
app.add_middleware(RequestUtilsMiddleware)
app.add_middleware(RequestThrottlerMiddleware)


# Routers (V1)
app.include_router(admin_router, prefix=f"{settings.API_V1_STR}/admin", tags=["Admin"])
app.include_router(catalog_router, prefix=f"{settings.API_V1_STR}/catalog", tags=["Catalog"])
app.include_router(cart_router, prefix=f"{settings.API_V1_STR}/cart", tags=["Cart"])
app.include_router(favorite_router, prefix=f"{settings.API_V1_STR}/favorites", tags=["Favorites"])
app.include_router(health_router, prefix="/health", include_in_schema=False)
app.include_router(order_router, prefix=f"{settings.API_V1_STR}/orders", tags=["Orders"])
app.include_router(profile_router, prefix=f"{settings.API_V1_STR}/profiles", tags=["Profiles"])
app.include_router(promotion_router, prefix=f"{settings.API_V1_STR}/promotions", tags=["Promotions"])
