from factdesk.store.base import Store
from factdesk.store.file import JsonFileStore
from factdesk.store.memory import InMemoryStore

__all__ = ["InMemoryStore", "JsonFileStore", "Store"]
