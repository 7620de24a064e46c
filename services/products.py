import logging
import re
from typing import Any, Dict

from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from errors import DuplicateProductError, ProductNotFound
from utils import serialize, to_object_id, utcnow

logger = logging.getLogger(__name__)


def _same_name(name: str) -> Dict[str, str]:
    return {"$regex": f"^{re.escape(name)}$", "$options": "i"}


def _find_or_404(db: Database, product_id: str) -> dict:
    oid = to_object_id(product_id)
    product = db.products.find_one({"_id": oid}) if oid else None
    if not product:
        raise ProductNotFound(product_id)
    return product


def get_product(db: Database, product_id: str) -> dict:
    product = serialize(_find_or_404(db, product_id))
    if product["stock"] == 0:
        logger.info("Product out of stock: %s", product["name"])
        product["availability"] = "out_of_stock"
        product["note"] = "This product is currently out of stock"
    else:
        product["availability"] = "in_stock"
    return product


def create_product(db: Database, data: Dict[str, Any]) -> dict:
    if db.products.find_one({"name": _same_name(data["name"])}):
        logger.warning("Product creation failed - duplicate name: %s", data["name"])
        raise DuplicateProductError(data["name"])

    now = utcnow()
    doc = dict(data, created_at=now, updated_at=now)
    try:
        result = db.products.insert_one(doc)
    except DuplicateKeyError:
        raise DuplicateProductError(data["name"])
    doc["_id"] = result.inserted_id
    logger.info("Product created: %s (ID: %s)", doc["name"], result.inserted_id)
    return serialize(doc)


def update_product(db: Database, product_id: str, changes: Dict[str, Any]) -> dict:
    existing = _find_or_404(db, product_id)

    new_name = changes.get("name")
    if new_name and new_name != existing["name"]:
        duplicate = db.products.find_one({"name": _same_name(new_name), "_id": {"$ne": existing["_id"]}})
        if duplicate:
            logger.warning("Product update failed - duplicate name: %s", new_name)
            raise DuplicateProductError(new_name)

    changes = dict(changes, updated_at=utcnow())
    updated = db.products.find_one_and_update(
        {"_id": existing["_id"]},
        {"$set": changes},
        return_document=ReturnDocument.AFTER,
    )
    if updated is None:
        # Deleted between the lookup and the write.
        raise ProductNotFound(product_id)
    logger.info("Product updated: %s", updated["name"])
    return serialize(updated)


def delete_product(db: Database, product_id: str) -> dict:
    product = _find_or_404(db, product_id)
    if product.get("stock", 0) > 0:
        # Orders keep their own price snapshot, so deletion is still allowed.
        logger.warning("Deleting product that still has stock: %s (%d units)", product["name"], product["stock"])
    db.products.delete_one({"_id": product["_id"]})
    logger.info("Product deleted: %s", product["name"])
    return serialize(product)
