from fastapi import APIRouter
from src.core.database.session import engine
from src.core.database.utils import check_db_health
from src.libs.kvstore import get_kv_service

router = APIRouter()


@router.get("/", include_in_schema=False)
def health_check() -> dict[str, str]:
    """
    Basic health check endpoint to verify the storefront API is running.
    """
    return {"status": "healthy"}


@router.get("/ready", include_in_schema=False)
async def readiness_check() -> dict[str, str]:
    """
    Report whether the database and the cart store answer.
    """
    database = await check_db_health(engine)
    cart_store_ok = await get_kv_service().health_check()

    return {
        "status": "healthy" if database["status"] == "ok" and cart_store_ok else "degraded",
        "database": database["status"],
        "cart_store": "ok" if cart_store_ok else "error",
    }
