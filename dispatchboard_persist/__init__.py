"""
Persistence facade exposing the dispatch store and its durable slot.
"""

from .stores.base_store import DurableSlot, StoreError, StorePersistError, StoreValidationError
from .stores.dispatch_store import DispatchStore, decode_state, encode_state
from .stores.json_slot import DEFAULT_SLOT_NAME, JsonFileSlot

__all__ = [
    "DispatchStore",
    "DurableSlot",
    "JsonFileSlot",
    "DEFAULT_SLOT_NAME",
    "StoreError",
    "StorePersistError",
    "StoreValidationError",
    "decode_state",
    "encode_state",
]
