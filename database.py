# database.py

import logging
from urllib.parse import quote_plus

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.server_api import ServerApi

from config.settings import settings

logger = logging.getLogger(__name__)


def build_mongo_uri() -> str:
    if settings.MONGO_URI:
        return settings.MONGO_URI
    if settings.MONGO_USER and settings.MONGO_PASSWORD and settings.MONGO_CLUSTER_URL:
        # Escape the username and password
        escaped_user = quote_plus(settings.MONGO_USER)
        escaped_password = quote_plus(settings.MONGO_PASSWORD)
        return (
            f"mongodb+srv://{escaped_user}:{escaped_password}@{settings.MONGO_CLUSTER_URL}"
            "/?retryWrites=true&w=majority"
        )
    return "mongodb://localhost:27017"


# MongoClient connects lazily; nothing touches the network until the first operation.
client = MongoClient(build_mongo_uri(), server_api=ServerApi("1"), serverSelectionTimeoutMS=5000)
db = client[settings.MONGO_DB_NAME]


def get_database() -> Database:
    """FastAPI dependency returning the shared database handle."""
    return db


def db_ping() -> None:
    client.admin.command("ping")


def ensure_indexes(database: Database) -> None:
    database.products.create_index([("created_at", DESCENDING)])
    database.products.create_index([("category", ASCENDING)])
    database.orders.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
    database.users.create_index([("username", ASCENDING)], unique=True)
    logger.info("MongoDB indexes ensured on database %s", database.name)
