import logging

from flask import current_app

from datastore.base import DataStore
from datastore.fallback import FallbackDataStore
from datastore.memory import MemoryDataStore
from datastore.seed_data import seed
from datastore.sql import SqlDataStore

logger = logging.getLogger(__name__)

BACKENDS = {
    "sql": SqlDataStore,
    "memory": MemoryDataStore,
}


def build_datastore(app, bus):
    backend = (app.config.get("DATASTORE_BACKEND") or "sql").lower()
    if backend not in BACKENDS:
        raise RuntimeError(f"Unknown DATASTORE_BACKEND: {backend}")

    store = BACKENDS[backend](bus=bus)
    if backend == "memory" and app.config.get("SEED_DEMO_DATA"):
        seed(store)

    if backend != "memory" and app.config.get("DATASTORE_READ_FALLBACK"):
        seeded = MemoryDataStore()
        seed(seeded)
        store = FallbackDataStore(store, seeded)

    logger.info("Data store: %s", store.name)
    app.extensions["datastore"] = store
    return store


def get_datastore():
    return current_app.extensions["datastore"]


__all__ = [
    "DataStore",
    "FallbackDataStore",
    "MemoryDataStore",
    "SqlDataStore",
    "build_datastore",
    "get_datastore",
    "seed",
]
