"""Product listing, search and the read-only catalog reports."""

import logging
import math
import re
from typing import Any, Dict, List, Optional, Tuple

from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database

from utils import serialize

logger = logging.getLogger(__name__)


def _contains(text: str) -> Dict[str, str]:
    return {"$regex": re.escape(text), "$options": "i"}


def build_product_filter(
    search: Optional[str] = None,
    category: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    in_stock_only: bool = True,
) -> Dict[str, Any]:
    """AND-combine the supplied filters; absent ones are left out entirely."""
    query: Dict[str, Any] = {}
    if search:
        query["$or"] = [{"name": _contains(search)}, {"description": _contains(search)}]
    if category:
        query["category"] = _contains(category)
    if min_price is not None or max_price is not None:
        price: Dict[str, float] = {}
        if min_price is not None:
            price["$gte"] = min_price
        if max_price is not None:
            price["$lte"] = max_price
        query["price"] = price
    if in_stock_only:
        query["stock"] = {"$gt": 0}
    return query


def paginate(page: int, limit: int, total: int) -> Dict[str, Any]:
    pages = math.ceil(total / limit) if limit else 0
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": pages,
        "has_next": page < pages,
        "has_prev": page > 1,
    }


def list_products(
    db: Database,
    search: Optional[str] = None,
    category: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    page: int = 1,
    limit: int = 12,
) -> Tuple[List[dict], Dict[str, Any]]:
    query = build_product_filter(search, category, min_price, max_price)
    skip = (page - 1) * limit
    # Ties on created_at fall back to storage order.
    cursor = db.products.find(query).sort("created_at", DESCENDING).skip(skip).limit(limit)
    products = [serialize(p) for p in cursor]
    total = db.products.count_documents(query)
    logger.debug("Found %d products out of %d total", len(products), total)
    return products, paginate(page, limit, total)


def low_stock_products(db: Database, threshold: int) -> List[dict]:
    cursor = db.products.find({"stock": {"$lte": threshold, "$gt": 0}}).sort("stock", ASCENDING)
    return [serialize(p) for p in cursor]


def list_categories(db: Database) -> List[str]:
    return sorted(db.products.distinct("category"), key=str.lower)
