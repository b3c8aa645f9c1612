"""Data persistence for saved studies."""

from opening_drill.data.storage import JsonFileStore, KeyValueStore, MemoryStore
from opening_drill.data.studies import (
    STORAGE_KEY,
    create_study,
    delete_study,
    find_study,
    load_studies,
    save_studies,
    update_study,
)

__all__ = [
    "KeyValueStore",
    "JsonFileStore",
    "MemoryStore",
    "STORAGE_KEY",
    "load_studies",
    "save_studies",
    "create_study",
    "update_study",
    "delete_study",
    "find_study",
]
