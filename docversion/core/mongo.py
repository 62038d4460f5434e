# docversion/core/mongo.py
"""
MongoDB client configuration.

This module centralizes MongoDB connection setup for versioned collections.
"""
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection

from docversion.core.config import settings

# Create the MongoDB client
client = AsyncIOMotorClient(
    settings.mongodb,
    maxPoolSize=settings.mongo_max_pool_size,
    minPoolSize=settings.mongo_min_pool_size,
    connectTimeoutMS=settings.mongo_connect_timeout_ms,
    serverSelectionTimeoutMS=settings.mongo_server_selection_timeout_ms,
    socketTimeoutMS=settings.mongo_socket_timeout_ms,
)


def get_database():
    """
    Get the configured MongoDB database.

    Returns:
        The MongoDB database instance.
    """
    return client[settings.mongodb_database]


def get_collection(name: str) -> AsyncIOMotorCollection:
    """Get a collection from the configured database."""
    return get_database()[name]
