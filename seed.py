# File: seed.py
# Run: python seed.py

import logging

from pymongo.database import Database

from auth.utils import get_password_hash
from config.settings import settings
from utils import utcnow

logger = logging.getLogger("seed")

SAMPLE_PRODUCTS = [
    {
        "name": "Wireless Bluetooth Headphones",
        "description": "High-quality wireless headphones with active noise cancellation and 30-hour battery life.",
        "price": 199.99,
        "category": "Electronics",
        "image_url": "https://images.unsplash.com/photo-1505740420928-5e560c06d30e?w=500",
        "stock": 25,
    },
    {
        "name": "Smart Fitness Watch",
        "description": "Fitness tracking smartwatch with heart rate monitor, GPS, and water resistance.",
        "price": 299.99,
        "category": "Electronics",
        "image_url": "https://images.unsplash.com/photo-1523275335684-37898b6baf30?w=500",
        "stock": 15,
    },
    {
        "name": "Ergonomic Office Chair",
        "description": "Comfortable ergonomic office chair with lumbar support and adjustable height.",
        "price": 249.99,
        "category": "Furniture",
        "image_url": "https://images.unsplash.com/photo-1586023492125-27b2c045efd7?w=500",
        "stock": 8,
    },
    {
        "name": "Mechanical Gaming Keyboard",
        "description": "RGB mechanical keyboard with tactile switches and customizable lighting.",
        "price": 129.99,
        "category": "Electronics",
        "image_url": "https://images.unsplash.com/photo-1541140532154-b024d705b90a?w=500",
        "stock": 20,
    },
    {
        "name": "Wireless Mouse",
        "description": "Precision wireless mouse with ergonomic design and long battery life.",
        "price": 49.99,
        "category": "Electronics",
        "image_url": "https://images.unsplash.com/photo-1527864550417-7f91c4c4b0c0?w=500",
        "stock": 35,
    },
    {
        "name": "Standing Desk Converter",
        "description": "Adjustable converter that turns any desk into a standing workstation.",
        "price": 179.99,
        "category": "Furniture",
        "image_url": "https://images.unsplash.com/photo-1586953208448-b95a79798f07?w=500",
        "stock": 12,
    },
    {
        "name": "Coffee Maker Pro",
        "description": "Programmable coffee maker with thermal carafe for the perfect cup every time.",
        "price": 89.99,
        "category": "Appliances",
        "image_url": "https://images.unsplash.com/photo-1495474472287-4d71bcdd2085?w=500",
        "stock": 18,
    },
    {
        "name": "Bluetooth Speaker",
        "description": "Portable speaker with 360-degree sound and a waterproof design.",
        "price": 79.99,
        "category": "Electronics",
        "image_url": "https://images.unsplash.com/photo-1608043152269-423dbba4e7e1?w=500",
        "stock": 22,
    },
    {
        "name": "Desk Lamp with USB",
        "description": "LED desk lamp with a USB charging port, touch control and adjustable brightness.",
        "price": 39.99,
        "category": "Furniture",
        "image_url": "https://images.unsplash.com/photo-1507003211169-0a1dd7228f2d?w=500",
        "stock": 30,
    },
]


def seed_database(db: Database, admin_username: str, admin_password: str) -> dict:
    """Insert the sample products and the admin account; existing entries are left alone."""
    inserted_products = 0
    for product in SAMPLE_PRODUCTS:
        if db.products.find_one({"name": product["name"]}):
            continue
        now = utcnow()
        db.products.insert_one(dict(product, created_at=now, updated_at=now))
        inserted_products += 1

    admin_created = False
    if not db.users.find_one({"username": admin_username}):
        now = utcnow()
        db.users.insert_one({
            "username": admin_username,
            "email": None,
            "password": get_password_hash(admin_password),
            "role": "admin",
            "created_at": now,
            "updated_at": now,
        })
        admin_created = True

    return {"products": inserted_products, "admin_created": admin_created}


if __name__ == "__main__":
    from database import db, ensure_indexes

    logging.basicConfig(level=settings.LOG_LEVEL, format="[%(levelname)s] %(asctime)s - %(message)s")
    ensure_indexes(db)
    result = seed_database(db, settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD)
    logger.info("Seeded %d products; admin created: %s", result["products"], result["admin_created"])
