import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.concurrency import run_in_threadpool
from pymongo.database import Database

from auth import utils as auth_utils
from config.settings import settings
from database import get_database
from models.order import OrderCreate, StatusUpdate
from services import inventory, orders as order_service
from utils import success_response, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["Orders"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(
    payload: OrderCreate,
    current_user: dict = Depends(auth_utils.get_current_user),
    db: Database = Depends(get_database),
):
    order = await run_in_threadpool(
        inventory.place_order,
        db,
        current_user,
        payload.items,
        payload.shipping_address.model_dump(),
        use_transaction=settings.MONGO_TRANSACTIONS,
    )
    return success_response(
        order,
        f"Order placed successfully! Your order total is ${order['total_amount']:.2f}",
        status_code=201,
    )


@router.get("")
async def my_orders(
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.ORDERS_PAGE_SIZE, ge=1, le=100),
    current_user: dict = Depends(auth_utils.get_current_user),
    db: Database = Depends(get_database),
):
    logger.debug("Fetching orders for user: %s", current_user["username"])
    items, pagination = await run_in_threadpool(
        order_service.list_user_orders, db, current_user["_id"], status=status_filter, page=page, limit=limit
    )
    return success_response(
        items, "Orders retrieved successfully" if items else "No orders found", pagination=pagination
    )


@router.get("/health")
async def orders_health():
    return success_response(
        {"service": "Orders Service", "status": "healthy", "timestamp": utcnow()},
        "Orders service is running",
    )


@router.get("/admin/stats")
async def order_statistics(
    admin: dict = Depends(auth_utils.get_current_admin),
    db: Database = Depends(get_database),
):
    logger.info("Fetching order statistics by admin: %s", admin["username"])
    stats = await run_in_threadpool(order_service.order_stats, db)
    return success_response(stats, "Order statistics retrieved successfully")


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    current_user: dict = Depends(auth_utils.get_current_user),
    db: Database = Depends(get_database),
):
    order = await run_in_threadpool(order_service.get_order, db, order_id, current_user)
    return success_response(order, "Order retrieved successfully")


@router.patch("/{order_id}/status")
async def update_status(
    order_id: str,
    payload: StatusUpdate,
    current_user: dict = Depends(auth_utils.get_current_user),
    db: Database = Depends(get_database),
):
    order = await run_in_threadpool(
        order_service.update_order_status, db, order_id, payload.status, current_user
    )
    return success_response(order, f"Order status updated to {payload.status}")
