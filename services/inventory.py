"""Order placement: validate line items, then commit the order and its stock decrements.

Placement runs in two phases:

* ``prepare_order`` is read-only. It walks the requested items in submission
  order, fails fast on the first missing product or short stock, snapshots the
  current price of every line and accumulates the total with ``Decimal``.
* ``commit_order`` writes. Each decrement is a conditional ``$inc`` that only
  matches while ``stock >= quantity``, so two requests that both passed
  validation against the same stock cannot both take it. Without a
  transaction, decrements already applied are given back when a later one
  fails or when the order insert fails, and the order is only inserted once
  every decrement has succeeded. With ``use_transaction`` the same writes run
  inside a single client session transaction instead.

Stock is therefore never driven below zero and an order is never persisted
without its decrements.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, NamedTuple, Optional

from pymongo.client_session import ClientSession
from pymongo.database import Database

from errors import InsufficientStockError, ProductNotFound
from models.order import OrderStatus
from services.orders import populate_order
from utils import round_money, to_object_id, utcnow

logger = logging.getLogger(__name__)


class OrderPlan(NamedTuple):
    items: List[Dict[str, Any]]
    total_amount: Decimal


def _item_fields(item: Any):
    if isinstance(item, dict):
        return item["product_id"], int(item["quantity"])
    return item.product_id, int(item.quantity)


def prepare_order(db: Database, items: Iterable[Any]) -> OrderPlan:
    total = Decimal("0")
    line_items: List[Dict[str, Any]] = []

    for item in items:
        product_id, quantity = _item_fields(item)
        oid = to_object_id(product_id)
        product = db.products.find_one({"_id": oid}) if oid else None
        if not product:
            logger.warning("Product not found: %s", product_id)
            raise ProductNotFound(str(product_id))

        if product["stock"] < quantity:
            logger.warning(
                "Insufficient stock for product: %s (requested: %d, available: %d)",
                product["name"], quantity, product["stock"],
            )
            raise InsufficientStockError(str(oid), product["name"], product["stock"], quantity)

        total += Decimal(str(product["price"])) * quantity
        line_items.append({"product_id": oid, "quantity": quantity, "price": product["price"]})

    return OrderPlan(items=line_items, total_amount=round_money(total))


def _session_kwargs(session: Optional[ClientSession]) -> Dict[str, Any]:
    return {"session": session} if session is not None else {}


def _decrement(db: Database, line: Dict[str, Any], session: Optional[ClientSession]) -> None:
    result = db.products.update_one(
        {"_id": line["product_id"], "stock": {"$gte": line["quantity"]}},
        {"$inc": {"stock": -line["quantity"]}, "$set": {"updated_at": utcnow()}},
        **_session_kwargs(session),
    )
    if result.matched_count == 1:
        return

    # The stock moved since validation; report what is left now.
    current = db.products.find_one({"_id": line["product_id"]}, {"name": 1, "stock": 1}, **_session_kwargs(session))
    if current is None:
        raise ProductNotFound(str(line["product_id"]))
    logger.warning(
        "Stock changed before commit for %s (requested: %d, available: %d)",
        current["name"], line["quantity"], current["stock"],
    )
    raise InsufficientStockError(str(line["product_id"]), current["name"], current["stock"], line["quantity"])


def _restore(db: Database, applied: List[Dict[str, Any]]) -> None:
    for line in reversed(applied):
        try:
            db.products.update_one(
                {"_id": line["product_id"]},
                {"$inc": {"stock": line["quantity"]}, "$set": {"updated_at": utcnow()}},
            )
        except Exception:
            logger.exception(
                "Could not restore %d units of stock to product %s", line["quantity"], line["product_id"]
            )


def _write_order(
    db: Database,
    user_id: Any,
    plan: OrderPlan,
    shipping_address: Dict[str, Any],
    session: Optional[ClientSession],
) -> Dict[str, Any]:
    now = utcnow()
    order = {
        "user_id": user_id,
        "items": plan.items,
        "total_amount": float(plan.total_amount),
        "status": OrderStatus.PENDING.value,
        "shipping_address": shipping_address,
        "created_at": now,
        "updated_at": now,
    }
    result = db.orders.insert_one(order, **_session_kwargs(session))
    order["_id"] = result.inserted_id
    return order


def commit_order(
    db: Database,
    user_id: Any,
    plan: OrderPlan,
    shipping_address: Dict[str, Any],
    use_transaction: bool = False,
) -> Dict[str, Any]:
    if use_transaction:
        def apply(session: ClientSession) -> Dict[str, Any]:
            for line in plan.items:
                _decrement(db, line, session)
            return _write_order(db, user_id, plan, shipping_address, session)

        with db.client.start_session() as session:
            return session.with_transaction(apply)

    applied: List[Dict[str, Any]] = []
    try:
        for line in plan.items:
            _decrement(db, line, None)
            applied.append(line)
        return _write_order(db, user_id, plan, shipping_address, None)
    except Exception:
        _restore(db, applied)
        raise


def place_order(
    db: Database,
    user: Dict[str, Any],
    items: Iterable[Any],
    shipping_address: Dict[str, Any],
    use_transaction: bool = False,
) -> Dict[str, Any]:
    items = list(items)
    logger.info("Creating order for user: %s with %d items", user.get("username"), len(items))

    plan = prepare_order(db, items)
    order = commit_order(db, user["_id"], plan, shipping_address, use_transaction=use_transaction)

    logger.info(
        "Order created: %s for user: %s, total: %s", order["_id"], user.get("username"), plan.total_amount
    )
    return populate_order(db, order)
