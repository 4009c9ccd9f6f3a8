"""
MongoDB connection management using Motor (async)
"""
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase, AsyncIOMotorCollection
from typing import Optional
from helpdesk.config import settings


# Global async client instance
_client: Optional[AsyncIOMotorClient] = None


def get_client() -> AsyncIOMotorClient:
    """
    Get or create async MongoDB client instance

    Returns:
        AsyncIOMotorClient: Async MongoDB client
    """
    global _client
    if _client is None:
        _client = AsyncIOMotorClient(settings.mongodb_uri)
    return _client


def get_database() -> AsyncIOMotorDatabase:
    """
    Get the helpdesk database

    Returns:
        AsyncIOMotorDatabase: Async MongoDB database instance
    """
    client = get_client()
    return client[settings.database_name]


def get_collection(collection_name: str) -> AsyncIOMotorCollection:
    """
    Get a specific collection from the database

    Args:
        collection_name: Name of the collection

    Returns:
        AsyncIOMotorCollection: Async MongoDB collection instance
    """
    db = get_database()
    return db[collection_name]


async def close_connection():
    """Close the async MongoDB connection"""
    global _client
    if _client is not None:
        _client.close()
        _client = None


# Collection names
COLLECTION_TICKETS = "tickets"
COLLECTION_COUNTERS = "counters"


async def ensure_indexes():
    """
    Create all required indexes for the database
    """
    db = get_database()

    tickets = db[COLLECTION_TICKETS]
    await tickets.create_index([("ticketId", 1)], unique=True)
    await tickets.create_index([("srNo", -1)])
    await tickets.create_index([("status", 1)])
    await tickets.create_index([("category", 1)])
    await tickets.create_index([("priority", 1)])
    await tickets.create_index([("raisedOn", -1)])
    await tickets.create_index([("createdAt", -1)])
