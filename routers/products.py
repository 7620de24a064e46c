import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.concurrency import run_in_threadpool
from pymongo.database import Database

from auth import utils as auth_utils
from config.settings import settings
from database import get_database
from models.product import ProductCreate, ProductUpdate
from services import catalog, products as product_service
from utils import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("")
async def list_products(
    search: Optional[str] = Query(None, max_length=100),
    category: Optional[str] = Query(None, max_length=50),
    min_price: Optional[float] = Query(None, gt=0),
    max_price: Optional[float] = Query(None, gt=0),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.PRODUCTS_PAGE_SIZE, ge=1, le=100),
    db: Database = Depends(get_database),
):
    logger.info('Products query: search="%s", category="%s", page=%d', search, category, page)
    items, pagination = await run_in_threadpool(
        catalog.list_products,
        db,
        search=search.strip() if search else None,
        category=category.strip() if category else None,
        min_price=min_price,
        max_price=max_price,
        page=page,
        limit=limit,
    )
    message = "Products retrieved successfully" if items else "No products found matching your criteria"
    return success_response(items, message, pagination=pagination)


# Fixed paths are declared before /{product_id} so they are not captured by it.
@router.get("/categories/list")
async def list_categories(db: Database = Depends(get_database)):
    categories = await run_in_threadpool(catalog.list_categories, db)
    return success_response({"categories": categories}, "Categories retrieved successfully")


@router.get("/admin/low-stock")
async def low_stock(
    threshold: int = Query(settings.LOW_STOCK_THRESHOLD, ge=1),
    admin: dict = Depends(auth_utils.get_current_admin),
    db: Database = Depends(get_database),
):
    logger.info("Fetching low stock products (threshold: %d) by admin: %s", threshold, admin["username"])
    items = await run_in_threadpool(catalog.low_stock_products, db, threshold)
    return success_response(items, f"Found {len(items)} products with low stock")


@router.get("/{product_id}")
async def get_product(product_id: str, db: Database = Depends(get_database)):
    product = await run_in_threadpool(product_service.get_product, db, product_id)
    if product["availability"] == "out_of_stock":
        return success_response(product, "Product retrieved (currently out of stock)")
    return success_response(product, "Product retrieved successfully")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    admin: dict = Depends(auth_utils.get_current_admin),
    db: Database = Depends(get_database),
):
    logger.info("Creating product: %s by admin: %s", payload.name, admin["username"])
    product = await run_in_threadpool(product_service.create_product, db, payload.to_document())
    return success_response(product, f'Product "{product["name"]}" created successfully', status_code=201)


@router.put("/{product_id}")
async def update_product(
    product_id: str,
    payload: ProductUpdate,
    admin: dict = Depends(auth_utils.get_current_admin),
    db: Database = Depends(get_database),
):
    logger.info("Updating product: %s by admin: %s", product_id, admin["username"])
    product = await run_in_threadpool(product_service.update_product, db, product_id, payload.to_update())
    return success_response(product, f'Product "{product["name"]}" updated successfully')


@router.delete("/{product_id}")
async def delete_product(
    product_id: str,
    admin: dict = Depends(auth_utils.get_current_admin),
    db: Database = Depends(get_database),
):
    logger.info("Deleting product: %s by admin: %s", product_id, admin["username"])
    product = await run_in_threadpool(product_service.delete_product, db, product_id)
    return success_response(None, f'Product "{product["name"]}" deleted successfully')
