from typing import Generator
from contextlib import asynccontextmanager

import pymongo
from pymongo.database import Database
from fastapi import FastAPI, Request

from utils.logger import get_logger

logger = get_logger(__name__)


def create_indexes(db: Database) -> None:
    """Lookup indexes; neither is unique since emails may repeat."""
    db.users.create_index([("email", pymongo.ASCENDING)])
    db.events.create_index([("userId", pymongo.ASCENDING)])


def ping(db: Database) -> bool:
    try:
        db.command("ping")
        return True
    except Exception as e:
        logger.warning(f"MongoDB ping failed: {e}")
        return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle MongoDB connection lifecycle for FastAPI app."""
    config = app.state.config
    client = app.state.mongo_client
    owns_client = client is None
    if owns_client:
        logger.info("Connecting to MongoDB")
        client = pymongo.MongoClient(config.MONGODB_URI)

    db = client[config.MONGODB_DB]
    if ping(db):
        logger.info("MongoDB ping succeeded")
    create_indexes(db)

    app.state.mongo_client = client
    app.state.db = db

    yield  # Hand control back to FastAPI

    app.state.db = None
    if owns_client:
        logger.info("Closing MongoDB connection")
        client.close()
        app.state.mongo_client = None


def get_db(request: Request) -> Generator[Database, None, None]:
    """Dependency to provide MongoDB Database instance."""
    db = getattr(request.app.state, "db", None)
    if db is None:
        config = request.app.state.config
        injected = getattr(request.app.state, "mongo_client", None)
        if injected is not None:
            # Caller owns the injected client; never close it here
            yield injected[config.MONGODB_DB]
            return
        # Fallback: create temp client if the lifespan did not run
        logger.warning("Database not initialised by lifespan, opening temporary client")
        client = pymongo.MongoClient(config.MONGODB_URI)
        try:
            yield client[config.MONGODB_DB]
        finally:
            client.close()
    else:
        yield db
