from .autosave import Autosaver
from .client import MapStoreClient, StoreError, empty_payload, from_store_payload, to_store_payload

__all__ = [
    "Autosaver",
    "MapStoreClient",
    "StoreError",
    "empty_payload",
    "from_store_payload",
    "to_store_payload",
]
