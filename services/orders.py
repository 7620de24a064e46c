import logging
from typing import Any, Dict, List, Optional, Tuple

from pymongo import DESCENDING
from pymongo.database import Database

from errors import ForbiddenError, InvalidStatusError, OrderNotFound
from models.order import ORDER_STATUSES
from services.catalog import paginate
from utils import serialize, to_object_id, utcnow

logger = logging.getLogger(__name__)

PRODUCT_DISPLAY_FIELDS = {"name": 1, "price": 1, "image_url": 1, "category": 1}
USER_DISPLAY_FIELDS = {"username": 1, "email": 1}


def is_admin(user: Dict[str, Any]) -> bool:
    return user.get("role") == "admin"


def populate_order(db: Database, order: Dict[str, Any], with_user: bool = True) -> Dict[str, Any]:
    """Resolve product display fields per line item and, optionally, the owner's display fields."""
    product_ids = list({item["product_id"] for item in order["items"]})
    products = {
        p["_id"]: serialize(p)
        for p in db.products.find({"_id": {"$in": product_ids}}, PRODUCT_DISPLAY_FIELDS)
    }

    result = serialize(order)
    for item, raw in zip(result["items"], order["items"]):
        # A deleted product leaves only the snapshot behind.
        item["product"] = products.get(raw["product_id"])

    if with_user:
        user = db.users.find_one({"_id": order["user_id"]}, USER_DISPLAY_FIELDS)
        result["user"] = serialize(user) if user else None
    return result


def _find_order(db: Database, order_id: str) -> Dict[str, Any]:
    oid = to_object_id(order_id)
    order = db.orders.find_one({"_id": oid}) if oid else None
    if not order:
        raise OrderNotFound(order_id)
    return order


def _check_access(order: Dict[str, Any], actor: Dict[str, Any]) -> None:
    if order["user_id"] != actor["_id"] and not is_admin(actor):
        logger.warning("Unauthorized access to order %s by user: %s", order["_id"], actor.get("username"))
        raise ForbiddenError("You do not have access to this order")


def list_user_orders(
    db: Database,
    user_id: Any,
    status: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[dict], Dict[str, Any]]:
    query: Dict[str, Any] = {"user_id": user_id}
    if status:
        query["status"] = status

    skip = (page - 1) * limit
    cursor = db.orders.find(query).sort("created_at", DESCENDING).skip(skip).limit(limit)
    orders = [populate_order(db, o, with_user=False) for o in cursor]
    total = db.orders.count_documents(query)
    return orders, paginate(page, limit, total)


def get_order(db: Database, order_id: str, actor: Dict[str, Any]) -> Dict[str, Any]:
    order = _find_order(db, order_id)
    _check_access(order, actor)
    return populate_order(db, order)


def update_order_status(db: Database, order_id: str, status: str, actor: Dict[str, Any]) -> Dict[str, Any]:
    """Overwrite the status of an order.

    Any status may follow any other, including backward and repeated moves.
    """
    order = _find_order(db, order_id)
    _check_access(order, actor)
    if status not in ORDER_STATUSES:
        raise InvalidStatusError(status, ORDER_STATUSES)

    now = utcnow()
    db.orders.update_one({"_id": order["_id"]}, {"$set": {"status": status, "updated_at": now}})
    order.update(status=status, updated_at=now)
    logger.info("Order status updated: %s to %s by user: %s", order["_id"], status, actor.get("username"))
    return populate_order(db, order)


def order_stats(db: Database) -> Dict[str, Any]:
    totals = list(db.orders.aggregate([
        {
            "$group": {
                "_id": None,
                "total_orders": {"$sum": 1},
                "total_revenue": {"$sum": "$total_amount"},
                "average_order_value": {"$avg": "$total_amount"},
            }
        }
    ]))
    by_status = db.orders.aggregate([{"$group": {"_id": "$status", "count": {"$sum": 1}}}])

    stats = {"total_orders": 0, "total_revenue": 0, "average_order_value": 0}
    if totals:
        stats.update({k: v for k, v in totals[0].items() if k != "_id"})
    stats["total_revenue"] = round(stats["total_revenue"], 2)
    stats["average_order_value"] = round(stats["average_order_value"] or 0, 2)
    stats["status_breakdown"] = {row["_id"]: row["count"] for row in by_status}
    return stats
