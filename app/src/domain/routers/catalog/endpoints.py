from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path, Query, status
from fastapi_problem.error import StatusProblem
from sqlmodel.ext.asyncio.session import AsyncSession
from src.core.database.session import get_db_session
from src.core.dependencies import require_admin
from src.core.exceptions import errors
from src.core.helpers.response import IResponseBase, build_json_response
from src.core.logging import get_logger
from src.domain.schemas import (
    AuthSessionState,
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)
from src.domain.services.catalog_service import CatalogService

logger = get_logger(__name__)


router = APIRouter()


@router.get(
    "/products",
    response_model=IResponseBase[list[ProductResponse]],
    operation_id="list_products",
)
async def list_products(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    category_id: Annotated[UUID | None, Query(description="Only products of this category")] = None,
) -> IResponseBase[list[ProductResponse]]:
    """
    List active products, newest first.
    """
    try:
        products = await CatalogService(session).list_products(category_id=category_id)

        return build_json_response(
            data=[ProductResponse.model_validate(product) for product in products],
            message="Products retrieved successfully",
            meta={"count": len(products)},
        )
    except errors.ServiceError as se:
        raise se
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.catalog.endpoints.list_products:: Error listing products: {e}")
        raise errors.ServiceError(detail="Failed to retrieve products") from e


@router.get(
    "/products/{product_id}",
    response_model=IResponseBase[ProductResponse],
    operation_id="get_product",
)
async def get_product(
    product_id: Annotated[UUID, Path(..., description="The ID of the product to retrieve")],
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> IResponseBase[ProductResponse]:
    """
    Get a product by ID
    """
    try:
        product = await CatalogService(session).get_product(product_id)

        return build_json_response(data=ProductResponse.model_validate(product), message="Product retrieved successfully")
    except errors.ServiceError as se:
        raise se
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.catalog.endpoints.get_product:: Error getting product {product_id}: {e}")
        raise errors.ServiceError(detail="Failed to retrieve product") from e


@router.post(
    "/products",
    response_model=IResponseBase[ProductResponse],
    status_code=status.HTTP_201_CREATED,
    operation_id="create_product",
)
async def create_product(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    auth_state: Annotated[AuthSessionState, Depends(require_admin)],  # noqa: ARG001
    product_data: Annotated[ProductCreate, Body(...)],
) -> IResponseBase[ProductResponse]:
    """
    Add a product to the catalog
    """
    try:
        product = await CatalogService(session).create_product(product_data)

        return build_json_response(data=ProductResponse.model_validate(product), message="Product created successfully")
    except errors.ServiceError as se:
        raise se
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.catalog.endpoints.create_product:: Error creating product: {e}")
        raise errors.ServiceError(detail="Failed to create product") from e


@router.put(
    "/products/{product_id}",
    response_model=IResponseBase[ProductResponse],
    operation_id="update_product",
)
async def update_product(
    product_id: Annotated[UUID, Path(..., description="The ID of the product to update")],
    session: Annotated[AsyncSession, Depends(get_db_session)],
    auth_state: Annotated[AuthSessionState, Depends(require_admin)],  # noqa: ARG001
    product_data: Annotated[ProductUpdate, Body(...)],
) -> IResponseBase[ProductResponse]:
    """
    Update the fields sent for a product
    """
    try:
        product = await CatalogService(session).update_product(product_id, product_data)

        return build_json_response(data=ProductResponse.model_validate(product), message="Product updated successfully")
    except errors.ServiceError as se:
        raise se
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.catalog.endpoints.update_product:: Error updating product {product_id}: {e}")
        raise errors.ServiceError(detail="Failed to update product") from e


@router.delete(
    "/products/{product_id}",
    response_model=IResponseBase[None],
    operation_id="delete_product",
)
async def delete_product(
    product_id: Annotated[UUID, Path(..., description="The ID of the product to delete")],
    session: Annotated[AsyncSession, Depends(get_db_session)],
    auth_state: Annotated[AuthSessionState, Depends(require_admin)],  # noqa: ARG001
) -> IResponseBase[None]:
    try:
        await CatalogService(session).delete_product(product_id)

        return build_json_response(data=None, message="Product deleted successfully")
    except errors.ServiceError as se:
        raise se
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.catalog.endpoints.delete_product:: Error deleting product {product_id}: {e}")
        raise errors.ServiceError(detail="Failed to delete product") from e


@router.get(
    "/categories",
    response_model=IResponseBase[list[CategoryResponse]],
    operation_id="list_categories",
)
async def list_categories(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> IResponseBase[list[CategoryResponse]]:
    """
    List active categories in display order with their product counts.
    """
    try:
        categories = await CatalogService(session).list_categories()

        return build_json_response(data=categories, message="Categories retrieved successfully")
    except errors.ServiceError as se:
        raise se
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.catalog.endpoints.list_categories:: Error listing categories: {e}")
        raise errors.ServiceError(detail="Failed to retrieve categories") from e


@router.get(
    "/categories/{category_id}",
    response_model=IResponseBase[CategoryResponse],
    operation_id="get_category",
)
async def get_category(
    category_id: Annotated[UUID, Path(..., description="The ID of the category to retrieve")],
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> IResponseBase[CategoryResponse]:
    try:
        category = await CatalogService(session).get_category(category_id)

        return build_json_response(data=category, message="Category retrieved successfully")
    except errors.ServiceError as se:
        raise se
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.catalog.endpoints.get_category:: Error getting category {category_id}: {e}")
        raise errors.ServiceError(detail="Failed to retrieve category") from e


@router.post(
    "/categories",
    response_model=IResponseBase[CategoryResponse],
    status_code=status.HTTP_201_CREATED,
    operation_id="create_category",
)
async def create_category(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    auth_state: Annotated[AuthSessionState, Depends(require_admin)],  # noqa: ARG001
    category_data: Annotated[CategoryCreate, Body(...)],
) -> IResponseBase[CategoryResponse]:
    """
    Create a category. The slug is derived from the name when omitted.
    """
    try:
        category = await CatalogService(session).create_category(category_data)

        return build_json_response(data=category, message="Category created successfully")
    except errors.ServiceError as se:
        raise se
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.catalog.endpoints.create_category:: Error creating category: {e}")
        raise errors.ServiceError(detail="Failed to create category") from e


@router.put(
    "/categories/{category_id}",
    response_model=IResponseBase[CategoryResponse],
    operation_id="update_category",
)
async def update_category(
    category_id: Annotated[UUID, Path(..., description="The ID of the category to update")],
    session: Annotated[AsyncSession, Depends(get_db_session)],
    auth_state: Annotated[AuthSessionState, Depends(require_admin)],  # noqa: ARG001
    category_data: Annotated[CategoryUpdate, Body(...)],
) -> IResponseBase[CategoryResponse]:
    try:
        category = await CatalogService(session).update_category(category_id, category_data)

        return build_json_response(data=category, message="Category updated successfully")
    except errors.ServiceError as se:
        raise se
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(
            f"src.domain.routers.catalog.endpoints.update_category:: Error updating category {category_id}: {e}"
        )
        raise errors.ServiceError(detail="Failed to update category") from e


@router.delete(
    "/categories/{category_id}",
    response_model=IResponseBase[None],
    operation_id="delete_category",
)
async def delete_category(
    category_id: Annotated[UUID, Path(..., description="The ID of the category to delete")],
    session: Annotated[AsyncSession, Depends(get_db_session)],
    auth_state: Annotated[AuthSessionState, Depends(require_admin)],  # noqa: ARG001
) -> IResponseBase[None]:
    """
    Delete a category. Its products are kept without a category.
    """
    try:
        await CatalogService(session).delete_category(category_id)

        return build_json_response(data=None, message="Category deleted successfully")
    except errors.ServiceError as se:
        raise se
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(
            f"src.domain.routers.catalog.endpoints.delete_category:: Error deleting category {category_id}: {e}"
        )
        raise errors.ServiceError(detail="Failed to delete category") from e
